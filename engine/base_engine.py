"""执行引擎基类（模板模式）。

把“周期推进/调度”与“单个周期的评估”解耦：子类实现 `run_once()`，
`run_cycles()` 负责按固定间隔重复调用，失败只记录、留给下一个周期重试。
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class EngineResult:
    """引擎运行结果（统一出口）。"""

    summary: dict[str, Any]
    artifacts: dict[str, Any] | None = None


class BaseEngine(ABC):
    """引擎抽象基类。"""

    @abstractmethod
    def run(self) -> EngineResult:
        raise NotImplementedError

    @staticmethod
    def run_cycles(
        *,
        run_once: Callable[[], Any],
        interval_secs: float,
        max_cycles: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        on_error: Callable[[Exception], None] | None = None,
    ) -> tuple[int, int]:
        """按固定间隔重复 `run_once`；返回 (周期数, 失败周期数)。"""
        cycles = 0
        failed = 0
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            try:
                run_once()
            except Exception as exc:
                failed += 1
                if on_error is None:
                    raise
                on_error(exc)
            if max_cycles is not None and cycles >= max_cycles:
                break
            sleep(interval_secs)
        return cycles, failed
