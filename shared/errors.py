"""异常分类。

约定：
- 配置期错误（重复 key / 未知 key / 交易对缺少金额配置）同时继承 `ValueError`，
  启动阶段与配置加载的其他错误一起尽早失败；
- 运行期错误（数据不足 / 拉取失败 / 推送失败）继承 `RuntimeError`，
  由 Watcher 记录后向上抛出，交给外部调度在下一个周期重试。
"""

from __future__ import annotations


class ExchainError(RuntimeError):
    """所有业务异常的基类。"""


class InsufficientData(ExchainError):
    """K 线数量不足以产出至少两个 MACD 柱。"""


class FetchFailure(ExchainError):
    """行情拉取失败（网络/解析/时间戳乱序）。"""


class DeliveryFailure(ExchainError):
    """通知推送失败。"""


class UnknownPairConfiguration(ExchainError, ValueError):
    """交易对没有配置 (small, big) 下单金额。"""

    def __init__(self, pair: str):
        super().__init__(f"Amount for {pair} pair not found. Declare it in strategy.amounts.")
        self.pair = pair


class DuplicateKey(ExchainError, ValueError):
    def __init__(self, key: str):
        super().__init__(f"`{key}` key duplicated.")
        self.key = key


class UnknownKey(ExchainError, ValueError):
    def __init__(self, key: str):
        super().__init__(f"`{key}` key not found. Use `add_fetcher` first.")
        self.key = key


class WatchCycleError(ExchainError):
    """非 fail-fast 模式下，一个周期内所有交易对失败的汇总。"""

    def __init__(self, failures: list[tuple[str, str, BaseException]], report=None):
        self.failures = failures
        # 本周期成功交易对的 WatchReport，失败时也不丢弃
        self.report = report
        detail = "; ".join(f"{actor}/{pair}: {exc!r}" for actor, pair, exc in failures)
        super().__init__(f"{len(failures)} pair(s) failed in watch cycle: {detail}")
