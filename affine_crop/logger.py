import logging
import os
import sys


def setup_logger(level: int = logging.INFO, name: str = "affine_crop") -> logging.Logger:
    """Create or update the project logger.

    - Respects env overrides AFFINE_CROP_LOG_LEVEL/AFFINE_CROP_LOG_CATS on every call
      (so a host application can change them after import).
    - Ensures there is exactly one stderr StreamHandler on the base logger and updates
      its formatter/filters instead of bailing out early.
    """
    logger = logging.getLogger(name)

    # Resolve level from env (override default)
    env_level = (os.getenv("AFFINE_CROP_LOG_LEVEL") or "").strip().lower()
    if env_level:
        level_map = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        level = level_map.get(env_level, level)
    logger.setLevel(level)

    # Ensure there is exactly one stderr StreamHandler.
    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            stream_handler = h

    if stream_handler is None:
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        logger.addHandler(stream_handler)

    # Formatter (idempotent)
    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    stream_handler.setFormatter(fmt)

    # Update category filter from env
    stream_handler.filters.clear()
    cats = (os.getenv("AFFINE_CROP_LOG_CATS") or "").strip()
    if cats:
        stream_handler.addFilter(CategoryFilter({c.strip() for c in cats.split(",") if c.strip()}))

    # Do not propagate beyond the project logger
    logger.propagate = False
    return logger


class CategoryFilter(logging.Filter):
    """Let through only records whose logger name ends in an allowed category."""

    def __init__(self, allowed: set[str]) -> None:
        super().__init__()
        self.allowed = allowed

    def filter(self, record: logging.LogRecord) -> bool:
        # record.name like: affine_crop.session, affine_crop.backing_move
        parts = (record.name or "").split(".")
        suffix = parts[-1] if parts else record.name
        return suffix in self.allowed


def get_logger(name: str | None = None) -> logging.Logger:
    base = setup_logger()
    return base if not name else base.getChild(name)
