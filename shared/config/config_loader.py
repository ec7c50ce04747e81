"""配置加载。

支持 YAML 配置、环境变量占位符 `${VAR}` 展开，以及 .env/.env.local 自动加载。
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from shared.config.schema import ActorConfig, AppConfig, IndicatorConfig, MainConfig, StrategyConfig
from shared.config.validation import validate_raw_config

__all__ = [
    "ActorConfig",
    "AppConfig",
    "IndicatorConfig",
    "MainConfig",
    "StrategyConfig",
    "load_config",
    "parse_config",
]

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
_ENV_FILES = (".env", ".env.local")


def _load_envs(cfg_path: Path) -> list[Path]:
    """加载配置文件目录与其上级目录下的 .env/.env.local，不覆盖已有环境变量。

    Returns
    -------
    list[Path]
        实际读取过的文件。
    """
    loaded: list[Path] = []
    for folder in (cfg_path.parent, cfg_path.parent.parent):
        for name in _ENV_FILES:
            env_file = folder / name
            if env_file.is_file():
                load_dotenv(env_file, override=False)
                loaded.append(env_file)
    return loaded


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        # 未设置的变量直接报错，避免静默替换为空
        def replacer(match):
            var_name = match.group(1)
            if var_name not in os.environ:
                raise ValueError(f"Missing environment variable: {var_name}")
            return os.environ[var_name]

        return _ENV_PATTERN.sub(replacer, value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def parse_config(raw_cfg: dict[str, Any], expand_env: bool = True) -> MainConfig:
    """校验 raw dict 并构建 MainConfig（pydantic 的 ValidationError 本身即 ValueError）。"""
    cfg = _expand_env(raw_cfg) if expand_env else raw_cfg
    validate_raw_config(cfg)
    return MainConfig.model_validate(cfg)


def load_config(path: str, load_env: bool = True, expand_env: bool = True) -> MainConfig:
    """从 YAML 读取并解析配置。

    Parameters
    ----------
    path:
        配置文件路径。
    load_env:
        是否自动加载 .env/.env.local。
    expand_env:
        是否展开 `${VAR}` 占位符。

    Returns
    -------
    MainConfig
        解析后的配置对象。

    Raises
    ------
    FileNotFoundError
        配置文件不存在。
    ValueError
        字段缺失/未知字段/取值非法或缺失环境变量。
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    if load_env:
        _load_envs(cfg_path)

    with cfg_path.open("r", encoding="utf-8") as f:
        raw_cfg: dict[str, Any] = yaml.safe_load(f) or {}

    return parse_config(raw_cfg, expand_env=expand_env)
