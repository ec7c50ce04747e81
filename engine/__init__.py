"""执行引擎层（engine）。

统一入口：`WatchEngine.run() -> EngineResult`；单个评估周期由 `Watcher.watch()` 完成。
命令行入口由仓库根目录 `main.py` 统一承载。
"""
