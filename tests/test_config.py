"""
Tests for utils/config.py and main.py - Configuration loading and the command line
"""

import pytest
from unittest.mock import patch

from contacts_report.utils import config as config_module
from contacts_report.utils.config import get_config, get_config_value, reset_config_cache, safe_split


class TestConfig:
    """Tests for YAML and environment configuration."""

    def test_defaults_without_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_module, "CONFIG_FILE_PATH", str(tmp_path / "missing.yaml"))
        monkeypatch.delenv("REPORT_RECIPIENT", raising=False)

        config = get_config()

        assert config["page_size"] == 100
        assert config["max_retries"] == 3
        assert config["cache_default_ttl"] == 3600
        assert config["contacts_cache_ttl"] == 1800
        assert config["birthday_window_days"] == 7
        assert config["report_recipient"] == ""
        assert "https://www.googleapis.com/auth/contacts" in config["google_auth_scopes"]

    def test_yaml_values(self, monkeypatch, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "contacts:\n"
            "  page_size: 50\n"
            "reports:\n"
            "  recipient: boss@example.com\n"
            "  birthday_window_days: 14\n"
            "google:\n"
            "  scopes: 'a, b'\n"
        )
        monkeypatch.setattr(config_module, "CONFIG_FILE_PATH", str(config_file))

        config = get_config()

        assert config["page_size"] == 50
        assert config["report_recipient"] == "boss@example.com"
        assert config["birthday_window_days"] == 14
        assert config["google_auth_scopes"] == ["a", "b"]

    def test_secrets_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_module, "CONFIG_FILE_PATH", str(tmp_path / "missing.yaml"))
        monkeypatch.setenv("GOOGLE_CLIENT_ID", "client-id")

        assert get_config_value("google_client_id") == "client-id"
        assert get_config_value("token_encryption_key") == "test_encryption_key_for_pytest"
        assert get_config_value("unknown", "fallback") == "fallback"

    def test_config_is_cached(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_module, "CONFIG_FILE_PATH", str(tmp_path / "missing.yaml"))

        first = get_config()
        assert get_config() is first

        reset_config_cache()
        assert get_config() is not first

    def test_invalid_yaml_falls_back_to_defaults(self, monkeypatch, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("contacts: [unclosed\n")
        monkeypatch.setattr(config_module, "CONFIG_FILE_PATH", str(config_file))

        assert get_config()["page_size"] == 100

    def test_safe_split(self):
        assert safe_split(None) == []
        assert safe_split("a, b,,c ") == ["a", "b", "c"]


class TestMain:
    """Tests for the command line entry point."""

    @patch("contacts_report.jobs.build_report_context")
    def test_run_report(self, mock_build, capsys):
        from contacts_report import main as main_module

        with patch.dict(main_module.JOBS, {"stats": lambda: {"message": "Sent contact statistics report"}}):
            main_module.main(["run", "stats"])

        assert "Sent contact statistics report" in capsys.readouterr().out
        mock_build.assert_not_called()

    def test_run_report_with_argument(self):
        from contacts_report import main as main_module

        calls = []
        with patch.dict(main_module.JOBS, {"upcoming-birthdays": lambda days: calls.append(days) or {"message": "ok"}}):
            main_module.main(["run", "upcoming-birthdays", "14"])

        assert calls == [14]

    def test_run_report_missing_argument(self):
        from contacts_report import main as main_module

        with pytest.raises(SystemExit):
            main_module.main(["run", "with-label"])

    def test_failing_report_exits_nonzero(self):
        from contacts_report import main as main_module

        def failing():
            raise RuntimeError("boom")

        with patch.dict(main_module.JOBS, {"stats": failing}):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main(["run", "stats"])

        assert exc_info.value.code == 1

    @patch("contacts_report.main.start_oauth_process")
    def test_authenticate_failure_exits(self, mock_start):
        from contacts_report import main as main_module

        mock_start.return_value = False

        with pytest.raises(SystemExit):
            main_module.main(["authenticate"])
