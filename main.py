"""exchain 统一命令行入口。

子命令：

- `watch`：按 interval_secs 轮询所有交易对，直到手动停止（或达到 --max-cycles）。
- `once`：只跑一个周期，便于 cron 等外部调度。
- `check`：只加载并校验配置，打印 actor/交易对概览。
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any

from engine.runner import WatchEngine
from shared.config.config_loader import load_config


@dataclass
class CliArgs:
    """命令行参数结构。

    config: 配置文件路径
    task: 要运行的任务类型 (watch/once/check)
    """
    config: str
    task: str
    max_cycles: int | None = None  # 仅 watch：跑多少个周期后退出


def build_parser() -> argparse.ArgumentParser:
    """构建 CLI 参数解析器。"""
    parser = argparse.ArgumentParser(prog="exchain", description="MACD 信号监控")

    def _add_config_arg(p: argparse.ArgumentParser, *, default: Any) -> None:
        p.add_argument(
            "--config",
            default=default,
            help="配置文件路径 (默认: config/config.yml)",
        )

    # 允许 `main.py --config ... watch` 与 `main.py watch --config ...`
    _add_config_arg(parser, default="config/config.yml")

    sub = parser.add_subparsers(dest="task")

    p_watch = sub.add_parser("watch", help="轮询主循环")
    _add_config_arg(p_watch, default=argparse.SUPPRESS)
    p_watch.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="跑多少个周期后退出（用于调试）",
    )

    p_once = sub.add_parser("once", help="只跑一个周期")
    _add_config_arg(p_once, default=argparse.SUPPRESS)

    p_check = sub.add_parser("check", help="校验配置")
    _add_config_arg(p_check, default=argparse.SUPPRESS)

    return parser


def parse_args(argv: list[str] | None = None) -> CliArgs:
    parser = build_parser()
    ns = parser.parse_args(argv)
    return CliArgs(
        config=str(getattr(ns, "config", "config/config.yml")),
        task=ns.task or "watch",
        max_cycles=getattr(ns, "max_cycles", None),
    )


def main(argv: list[str] | None = None) -> Any:
    """程序主入口；返回对应子命令的 summary dict。"""
    args = parse_args(argv)

    if args.task == "watch":
        return WatchEngine(cfg_path=args.config, max_cycles=args.max_cycles).run().summary

    if args.task == "once":
        report = WatchEngine(cfg_path=args.config).run_once()
        return {
            "signals": {f"{r.actor}/{r.pair}": r.event.status.value for r in report.results},
            "orders": [{"pair": o.pair, "status": o.status.value, "amount": o.amount} for o in report.orders],
        }

    if args.task == "check":
        cfg = load_config(args.config)
        summary = {
            "interval_secs": cfg.interval_secs,
            "indicator": cfg.indicator.model_dump(),
            "actors": {key: list(actor.pairs) for key, actor in cfg.actors.items()},
        }
        print(f"Config OK: {summary}")
        return summary

    raise ValueError(f"Unknown task: {args.task}")


if __name__ == "__main__":
    main()
