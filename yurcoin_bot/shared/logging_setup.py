import logging
import os
import sys
import threading
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional


SERVICE_LOGGER = "yurcoin"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _log_cfg(cfg: Dict[str, Any]) -> Dict[str, Any]:
    return (cfg or {}).get("logging") or {}


def resolve_log_dir(base_dir: Path, cfg: Dict[str, Any]) -> Path:
    """logging.dir from bot_config.json; relative dirs live under the data dir."""
    d = str(_log_cfg(cfg).get("dir") or "").strip() or "logs"
    p = Path(os.path.expanduser(d))
    if not p.is_absolute():
        p = (base_dir / p).resolve()
    return p


def _add_handler(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def _rotating(path: Path, log_cfg: Dict[str, Any]) -> RotatingFileHandler:
    return RotatingFileHandler(
        path,
        maxBytes=int(log_cfg.get("max_bytes") or 5 * 1024 * 1024),
        backupCount=int(log_cfg.get("backup_count") or 5),
        encoding="utf-8",
    )


def setup_logging(service_name: str, cfg: Dict[str, Any], base_dir: Path) -> logging.Logger:
    """Configure logging for the bot process.

    Handlers: stdout, <service>.<YYYY-MM-DD>.log and latest.log (both
    rotating) in the logging dir. Calling it again replaces the handlers.

      "logging": { "dir": "logs", "level": "DEBUG" }

    Library modules log through ``get_logger(...)`` children, so they reach
    these handlers once the service logger is ``yurcoin``.
    """
    log_cfg = _log_cfg(cfg)
    logs_dir = resolve_log_dir(base_dir, cfg)
    logs_dir.mkdir(parents=True, exist_ok=True)

    level = _LEVELS.get(str(log_cfg.get("level") or "INFO").strip().upper(), logging.INFO)
    service_file = logs_dir / f"{service_name}.{time.strftime('%Y-%m-%d')}.log"

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    _add_handler(logger, logging.StreamHandler(stream=sys.stdout), level)
    _add_handler(logger, _rotating(service_file, log_cfg), level)
    _add_handler(logger, _rotating(logs_dir / "latest.log", log_cfg), level)

    _install_global_exception_hooks(logger)

    logger.debug("Logging initialized: level=%s logs_dir=%s", logging.getLevelName(level), str(logs_dir))
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger of the service logger (``yurcoin.<name>``)."""
    return logging.getLogger(f"{SERVICE_LOGGER}.{name}" if name else SERVICE_LOGGER)


def _install_global_exception_hooks(logger: logging.Logger) -> None:
    def _excepthook(exctype, value, tb):
        logger.critical("Unhandled exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)

    def _thread_excepthook(args):
        thread = getattr(args, "thread", None)
        logger.critical(
            "Unhandled exception in thread %s",
            thread.name if thread else "(unknown)",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook
