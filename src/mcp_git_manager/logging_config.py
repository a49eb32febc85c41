import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from .configuration import ConfigState

AUDIT_LOG_FORMAT = "%(asctime)s [%(levelname)s]: %(message)s"
PACKAGE_LOGGER = "mcp_git_manager"


class SafeStreamHandler(logging.StreamHandler):
    """
    Stream handler that gracefully handles closed streams during shutdown.
    """

    def emit(self, record):
        try:
            super().emit(record)
        except (ValueError, OSError) as e:
            # Closed stderr during interpreter shutdown
            if "closed file" in str(e).lower() or "bad file descriptor" in str(e).lower():
                pass
            else:
                raise


class AuditLogFormatter(logging.Formatter):
    """
    Formats records as ``<ISO-8601 UTC timestamp> [LEVEL]: message``.
    """

    def __init__(self):
        super().__init__(AUDIT_LOG_FORMAT)

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StructuredLogFormatter(logging.Formatter):
    """
    Formats log records as structured JSON with contextual fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in ("tool", "request_id", "duration_ms"):
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_record["exception"] = record.exc_text
        return json.dumps(log_record, ensure_ascii=False)


class WorkingDirectoryFileHandler(logging.Handler):
    """
    Appends records to the audit log of the *current* working directory.

    The target path is looked up on every record, so the log follows
    ``load_config``. Write failures are reported on stderr and never raised.
    """

    def __init__(self, config_state: ConfigState, level=logging.DEBUG):
        super().__init__(level)
        self.config_state = config_state
        self.setFormatter(AuditLogFormatter())

    def emit(self, record):
        try:
            line = self.format(record)
            log_file = self.config_state.get_config().log_file_path
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)

    def handleError(self, record):
        error = sys.exc_info()[1]
        try:
            sys.stderr.write(f"Logging error: {error}\n")
        except (ValueError, OSError):
            pass


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    config_state: Optional[ConfigState] = None,
) -> None:
    """
    Centralized logging configuration for MCP Git Manager.

    Sets up the root logger on stderr (stdout carries protocol frames only) and,
    when a ConfigState is given, the audit log in the working directory.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = SafeStreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(AuditLogFormatter())
    handler.setLevel(log_level.upper())
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(package_logger.handlers):
        if isinstance(existing, WorkingDirectoryFileHandler):
            package_logger.removeHandler(existing)
    if config_state is not None:
        package_logger.addHandler(WorkingDirectoryFileHandler(config_state))

    # Silence overly verbose loggers
    logging.getLogger("asyncio").setLevel("WARNING")
    logging.getLogger("git").setLevel("WARNING")
    logging.getLogger("mcp").setLevel("WARNING")
