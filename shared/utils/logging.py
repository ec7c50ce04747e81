import logging
import os


def setup_logger(name: str = "exchain", level: int | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is None:
        level_str = os.getenv("EXCHAIN_LOG_LEVEL", "INFO").upper()
        level = getattr(logging, level_str, logging.INFO)
    logger.setLevel(level)
    # 同名 logger 只挂一个控制台 handler
    if logger.handlers:
        return logger
    ch = logging.StreamHandler()
    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    )
    ch.setFormatter(fmt)
    logger.addHandler(ch)
    return logger
