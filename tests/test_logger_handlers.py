import logging
import sys

from affine_crop import logger as ac_logger


def _stderr_handlers(base: logging.Logger) -> list[logging.Handler]:
    return [
        h
        for h in base.handlers
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
    ]


def test_setup_logger_idempotent_handlers(tmp_path, monkeypatch):
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    monkeypatch.chdir(tmp_path)
    base = ac_logger.setup_logger(level=logging.DEBUG)
    _ = ac_logger.setup_logger(level=logging.DEBUG)

    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_overrides_argument(monkeypatch):
    monkeypatch.setenv("AFFINE_CROP_LOG_LEVEL", "warning")
    try:
        base = ac_logger.setup_logger(level=logging.DEBUG)
        assert base.level == logging.WARNING
    finally:
        monkeypatch.delenv("AFFINE_CROP_LOG_LEVEL")
        ac_logger.setup_logger()


def test_get_logger_returns_child():
    child = ac_logger.get_logger("session")
    assert child.name == "affine_crop.session"
    assert ac_logger.get_logger() is logging.getLogger("affine_crop")
