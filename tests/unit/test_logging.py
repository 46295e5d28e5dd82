"""Unit tests for coursereg logging configuration."""

import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from coursereg.logging import get_logger, sanitize_for_log, setup_logging


@pytest.fixture(autouse=True)
def reset_coursereg_logger() -> Iterator[None]:
    """Detach handlers added by setup_logging once the test is done."""
    yield
    logger = logging.getLogger("coursereg")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_nested_log_directory(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "var" / "logs"
        setup_logging(log_dir=log_dir, console=False)
        assert (log_dir / "coursereg.log").exists()

    def test_component_loggers_share_the_file(self, tmp_path: Path) -> None:
        """Records from every component land in coursereg.log."""
        setup_logging(log_dir=tmp_path, console=False)

        logging.getLogger("coursereg.registration.machine").info("approved r1")
        logging.getLogger("coursereg.capacity.ledger").warning("seat drift on c1")

        content = (tmp_path / "coursereg.log").read_text()
        assert " | INFO     | coursereg.registration.machine | approved r1" in content
        assert " | WARNING  | coursereg.capacity.ledger | seat drift on c1" in content

    def test_level_filters_records(self, tmp_path: Path) -> None:
        logger = setup_logging(log_dir=tmp_path, level="warning", console=False)
        logger.info("hidden")
        logger.error("shown")

        content = (tmp_path / "coursereg.log").read_text()
        assert "hidden" not in content
        assert "shown" in content

    def test_environment_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COURSEREG_LOG_DIR", str(tmp_path))
        monkeypatch.setenv("COURSEREG_LOG_LEVEL", "DEBUG")

        logger = setup_logging(console=False)

        assert logger.level == logging.DEBUG
        assert (tmp_path / "coursereg.log").exists()

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)
        logger = setup_logging(log_dir=tmp_path, console=True)

        assert logger.name == "coursereg"
        assert len(logger.handlers) == 2

    def test_rotation(self, tmp_path: Path) -> None:
        logger = setup_logging(
            log_dir=tmp_path, log_file="api.log", max_bytes=400, backup_count=2, console=False
        )
        handler = logger.handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert (handler.maxBytes, handler.backupCount) == (400, 2)

        for i in range(40):
            logger.info("registration %d approved for course section with padding", i)

        assert (tmp_path / "api.log.1").exists()
        assert not (tmp_path / "api.log.3").exists()


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger function."""

    def test_prefixes_component(self) -> None:
        assert get_logger("capacity").name == "coursereg.capacity"

    def test_keeps_existing_prefix(self) -> None:
        assert get_logger("coursereg.semesters").name == "coursereg.semesters"


@pytest.mark.unit
class TestSanitize:
    """Tests for sanitize_for_log function."""

    def test_bearer_token(self) -> None:
        result = sanitize_for_log("Authorization: Bearer abc123.def456")
        assert result == "Authorization: Bearer [REDACTED]"

    def test_jwt(self) -> None:
        result = sanitize_for_log("session eyJhbGciOi.eyJzdWIiOi.c2lnbmF0dXJl")
        assert result == "session [JWT]"

    def test_password_field(self) -> None:
        result = sanitize_for_log('{"email": "sam@uni.test", "password": "hunter2"}')
        assert "hunter2" not in result
        assert "sam@uni.test" in result

    def test_token_query_parameter(self) -> None:
        assert sanitize_for_log("/reset?token=xyz789") == "/reset?token=[REDACTED]"

    def test_plain_text_unchanged(self) -> None:
        text = "Registration 42 moved to approved"
        assert sanitize_for_log(text) == text
