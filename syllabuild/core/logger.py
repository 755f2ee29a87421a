import collections
import logging
from datetime import datetime
from typing import Dict, List

from syllabuild.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LogBuffer:
    def __init__(self, max_size: int = 500):
        self.logs = collections.deque(maxlen=max_size)

    def add_log(self, record: logging.LogRecord):
        # Only explicit pipeline steps are kept, not general application logs
        if getattr(record, "is_step", False):
            self.logs.append({
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "level": "STEP",
                "module": "generation",
                "message": record.getMessage(),
            })

    def get_logs(self) -> List[Dict]:
        return list(self.logs)

    def clear(self):
        self.logs.clear()


# Global instance
log_buffer = LogBuffer()


class BufferHandler(logging.Handler):
    def emit(self, record):
        try:
            log_buffer.add_log(record)
        except Exception:
            self.handleError(record)


def setup_logging():
    """Attach a console handler and the step buffer to the root logger."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Avoid duplicate handlers if the app module is reloaded
    if not any(isinstance(h, BufferHandler) for h in root_logger.handlers):
        root_logger.addHandler(BufferHandler())
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(console)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "syllabuild"):
        logging.getLogger(logger_name).setLevel(level)


def log_step(message: str):
    """Log a user-facing pipeline step to the console buffer."""
    logger = logging.getLogger("syllabuild.steps")
    logger.info(message, extra={"is_step": True})
