"""Unit tests for settings loading."""

from pathlib import Path

import pytest

from coursereg.config import ConfigError, Settings, load_settings


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "coursereg.yaml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.unit
class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = load_settings(environ={})

        assert settings.db_path == "coursereg.db"
        assert settings.default_max_credits == 24
        assert (settings.grading_policy.attendance, settings.grading_policy.final) == (10, 60)
        assert settings.cors_origins == ["*"]

    def test_reads_yaml(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path,
            """
db_path: /var/lib/coursereg/registry.db
log_level: debug
default_max_credits: 18
grading_policy:
  attendance: 20
  midterm: 30
  final: 50
cors_origins:
  - https://portal.uni.test
""",
        )

        settings = load_settings(path, environ={})

        assert settings.db_path == "/var/lib/coursereg/registry.db"
        assert settings.log_level == "DEBUG"
        assert settings.default_max_credits == 18
        assert settings.grading_policy.midterm == 30
        assert settings.cors_origins == ["https://portal.uni.test"]

    def test_picks_up_file_in_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_config(tmp_path, "db_path: local.db\n")
        monkeypatch.chdir(tmp_path)
        assert load_settings(environ={}).db_path == "local.db"

    def test_environment_wins(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "db_path: file.db\ndefault_max_credits: 18\n")

        settings = load_settings(
            path,
            environ={
                "COURSEREG_DB_PATH": "env.db",
                "COURSEREG_LOG_LEVEL": "warning",
                "COURSEREG_DEFAULT_MAX_CREDITS": "30",
            },
        )

        assert settings.db_path == "env.db"
        assert settings.log_level == "WARNING"
        assert settings.default_max_credits == 30

    def test_empty_file(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "")
        assert load_settings(path, environ={}) == Settings()


@pytest.mark.unit
class TestInvalidSettings:
    """Tests for configuration errors."""

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yaml", environ={})

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "db_path: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path, environ={})

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "- one\n- two\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path, environ={})

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="max_student"):
            Settings.from_dict({"max_student": 10})

    @pytest.mark.parametrize(
        "policy",
        [{"attendance": 50, "midterm": 30, "final": 30}, {"attendance": -10, "midterm": 50, "final": 60}],
    )
    def test_bad_grading_policy(self, policy: dict[str, int]) -> None:
        with pytest.raises(ConfigError):
            Settings.from_dict({"grading_policy": policy})

    def test_non_integer_credits(self) -> None:
        with pytest.raises(ConfigError):
            Settings.from_dict({"default_max_credits": "many"})
        with pytest.raises(ConfigError):
            Settings.from_dict({"default_max_credits": True})

    def test_bad_environment_value(self) -> None:
        with pytest.raises(ConfigError):
            Settings().apply_environment({"COURSEREG_DEFAULT_MAX_CREDITS": "lots"})
