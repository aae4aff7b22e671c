from __future__ import annotations

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

# Chatty SDK loggers; request/response dumps at INFO would swamp the file.
_NOISY_LOGGERS = ("azure", "azure.core.pipeline.policies.http_logging_policy", "urllib3", "msal")


def _resolve_log_dir(settings: object) -> Path:
    """Resolve the log directory.

    - If DISCRETION_LOG_DIR is absolute, use it directly.
    - Otherwise, treat it as relative to the project root.
    """

    raw = getattr(settings, "DISCRETION_LOG_DIR", Path("_logs"))
    p = raw if isinstance(raw, Path) else Path(str(raw))
    if p.is_absolute():
        return p

    project_root = Path(__file__).resolve().parents[1]
    return project_root / p


def setup_logging(settings: object, *, console: bool = False) -> Path:
    """Configure Python logging to write to a rotating diagnostic log file.

    Returns the resolved log file path.

    Rotation:
      - Daily rotation at midnight.
      - Keep the last `DISCRETION_LOG_BACKUP_COUNT` rotated files.

    Notes:
      - The interactive browser owns the terminal, so it calls this with
        `console=False`; one-shot CLI commands may also log to stderr.
      - This function is safe to call multiple times (it resets handlers).
    """

    log_dir = _resolve_log_dir(settings)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "discretion.log"

    level_name = str(getattr(settings, "DISCRETION_LOG_LEVEL", "INFO") or "INFO").upper().strip()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    file_handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when="midnight",
        interval=1,
        backupCount=max(0, int(getattr(settings, "DISCRETION_LOG_BACKUP_COUNT", 7) or 0)),
        encoding="utf-8",
        utc=False,
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(fmt))

    # Reset root handlers so we don't duplicate logs on repeated starts.
    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers = []
    root.setLevel(level)
    root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(max(level, logging.WARNING))
        console_handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger("discretion").info(
        "discretion logging enabled (file=%s, level=%s, console=%s)",
        os.fspath(log_file),
        level_name,
        console,
    )

    return log_file
