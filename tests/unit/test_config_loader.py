"""Tests for configuration loader with priority resolution."""

from pathlib import Path

import pytest

from eta_analyzer.config.loader import ConfigLoader, ConfigurationError, load_config, load_config_for_testing


class TestConfigLoader:
    """Test configuration loader functionality."""

    def test_load_default_config(self):
        """Test loading with defaults only."""
        config = load_config_for_testing()

        assert config.paths.logs_dir == Path("./logs").resolve()
        assert config.screening.sba_rate_pct == 10.5
        assert config.screening.sba_loan_limit == 5_000_000
        assert config.scorecard.response_rate_target == 40
        assert config.scorecard.goal_targets == {}
        assert config.logging.level == "INFO"

    def test_yaml_override(self):
        """Test YAML file overrides defaults."""
        yaml_content = """
        paths:
          data_dir: "./custom/data"
        screening:
          down_payment_pct: 15
        scorecard:
          goal_targets:
            meetings: 5
        """

        config = load_config_for_testing(yaml_content=yaml_content)

        assert config.paths.data_dir == Path("./custom/data").resolve()
        assert config.screening.down_payment_pct == 15
        assert config.scorecard.goal_targets == {"meetings": 5}
        # Non-overridden values should remain defaults
        assert config.screening.seller_note_pct == 10

    def test_env_var_override(self):
        """Test environment variables override YAML."""
        yaml_content = """
        screening:
          sba_rate_pct: 11.0
          sba_term_years: 25
        """

        env_vars = {
            "ETA_SCREENING__SBA_RATE_PCT": "9.75",
            "ETA_SCORECARD__RESPONSE_RATE_TARGET": "35",
        }

        config = load_config_for_testing(yaml_content=yaml_content, env_vars=env_vars)

        assert config.screening.sba_rate_pct == 9.75
        assert config.screening.sba_term_years == 25
        assert config.scorecard.response_rate_target == 35

    def test_cli_override(self):
        """Test CLI arguments override both YAML and env vars."""
        yaml_content = """
        screening:
          sba_rate_pct: 11.0
          seller_note_pct: 5
        """

        env_vars = {"ETA_SCREENING__SBA_RATE_PCT": "9.75"}
        cli_overrides = {"screening": {"sba_rate_pct": 8.0}, "logging": {"level": "DEBUG"}}

        config = load_config_for_testing(yaml_content=yaml_content, env_vars=env_vars, cli_overrides=cli_overrides)

        assert config.screening.sba_rate_pct == 8.0
        assert config.logging.level == "DEBUG"
        assert config.screening.seller_note_pct == 5

    def test_env_var_parsing(self):
        """Test parsing of different environment variable types."""
        env_vars = {
            "ETA_LOGGING__FILE": "false",
            "ETA_LOGGING__CONSOLE": "on",
            "ETA_LOGGING__RETENTION_DAYS": "7",
            "ETA_SCREENING__SELLER_NOTE_RATE_PCT": "6.5",
        }

        config = load_config_for_testing(env_vars=env_vars)

        assert config.logging.file is False
        assert config.logging.console is True
        assert config.logging.retention_days == 7
        assert config.screening.seller_note_rate_pct == 6.5

    def test_unrelated_env_vars_ignored(self):
        """Prefixed variables that name no section are skipped."""
        config = load_config_for_testing(env_vars={"ETA_HOME": "/opt/eta"})
        assert config.logging.level == "INFO"

    def test_invalid_yaml_error(self):
        """Test handling of invalid YAML file."""
        yaml_content = """
        invalid: yaml: content:
        - missing
          proper: structure
        """

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config_for_testing(yaml_content=yaml_content)

    def test_non_mapping_yaml_error(self):
        with pytest.raises(ConfigurationError, match="top level must be a mapping"):
            load_config_for_testing(yaml_content="- just\n- a list\n")

    def test_unknown_section_error(self):
        with pytest.raises(ConfigurationError, match="Unknown section"):
            load_config_for_testing(yaml_content="llm:\n  temperature: 0.5\n")

    def test_validation_error(self):
        """Test helpful validation error messages."""
        yaml_content = """
        screening:
          down_payment_pct: 150  # Invalid - above 100
        logging:
          retention_days: -1  # Invalid - negative
        """

        with pytest.raises(ConfigurationError) as exc_info:
            load_config_for_testing(yaml_content=yaml_content)

        error_msg = str(exc_info.value)
        assert "Configuration validation failed" in error_msg
        assert "screening -> down_payment_pct" in error_msg
        assert "logging -> retention_days" in error_msg

    def test_unknown_goal_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown goal"):
            load_config_for_testing(cli_overrides={"scorecard": {"goal_targets": {"coffee_chats": 2}}})

    def test_missing_yaml_file(self, tmp_path):
        """Test handling of missing YAML file."""
        config = load_config(config_path=str(tmp_path / "missing.yaml"), validate=False)
        assert config.screening.down_payment_pct == 10

    def test_validate_creates_directories(self, tmp_path):
        cli_overrides = {"paths": {"logs_dir": str(tmp_path / "logs"), "data_dir": str(tmp_path / "data")}}
        load_config(config_path=str(tmp_path / "missing.yaml"), cli_overrides=cli_overrides)

        assert (tmp_path / "logs").is_dir()
        assert (tmp_path / "data").is_dir()

    def test_config_sources_info(self, monkeypatch):
        """Test configuration sources information."""
        monkeypatch.setenv("ETA_LOGGING__LEVEL", "DEBUG")
        loader = ConfigLoader("config.yaml")
        info = loader.get_config_sources_info()

        assert "yaml_file" in info
        assert "cli_overrides" in info
        assert info["yaml_file"]["path"].endswith("config.yaml")
        assert "ETA_LOGGING__LEVEL" in info["environment_variables"]["variables"]


def test_example_config_loads():
    """The shipped example config matches the schema defaults."""
    config_path = Path(__file__).parent.parent.parent / "config.example.yaml"

    if config_path.exists():
        config = load_config(str(config_path), validate=False)
        assert config.screening.sba_loan_limit == 5_000_000
        assert config.scorecard.cim_compliance_green_pct == 90
