"""Configuration loading tests."""

import pytest

from stepbridge import Client
from stepbridge.config import OutputValidation, get_config, load_config

ENV_VARS = [
    "STEPBRIDGE_SECRET_KEY",
    "STEPBRIDGE_STRICT_AUTHENTICATION_ENABLED",
    "STEPBRIDGE_ENV",
    "STEPBRIDGE_SIGNATURE_TOLERANCE",
    "STEPBRIDGE_OUTPUT_VALIDATION",
    "STEPBRIDGE_BRIDGE_URL",
    "STEPBRIDGE_BRIDGE_RETRIES",
    "STEPBRIDGE_BRIDGE_TIMEOUT",
    "STEPBRIDGE_DEBUG",
    "STEPBRIDGE_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadConfig:

    def test_defaults(self, clean_env):
        """Verify unset options fall back to defaults."""
        config = load_config()

        assert config.security.secret_key is None
        assert config.security.strict_authentication is False
        assert config.security.signature_tolerance_seconds == 300
        assert config.bridge.retries_limit == 3
        assert config.output_validation == OutputValidation.LENIENT
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_production_enables_strict_authentication(self, clean_env):
        """Verify production mode turns on strict authentication."""
        clean_env.setenv("STEPBRIDGE_ENV", "production")

        assert load_config().security.strict_authentication is True

    def test_explicit_flag_wins(self, clean_env):
        """Verify an explicit flag wins over the environment mode."""
        clean_env.setenv("STEPBRIDGE_ENV", "production")
        clean_env.setenv("STEPBRIDGE_STRICT_AUTHENTICATION_ENABLED", "false")

        assert load_config().security.strict_authentication is False

    def test_values_from_environment(self, clean_env):
        """Verify values are read from the environment."""
        clean_env.setenv("STEPBRIDGE_SECRET_KEY", "s3cret")
        clean_env.setenv("STEPBRIDGE_OUTPUT_VALIDATION", "STRICT")
        clean_env.setenv("STEPBRIDGE_BRIDGE_URL", "http://localhost:4000/api/stepbridge")
        clean_env.setenv("STEPBRIDGE_BRIDGE_TIMEOUT", "5")
        clean_env.setenv("STEPBRIDGE_LOG_LEVEL", "debug")

        config = load_config()

        assert config.security.secret_key == "s3cret"
        assert config.output_validation == OutputValidation.STRICT
        assert config.bridge.url == "http://localhost:4000/api/stepbridge"
        assert config.bridge.timeout_seconds == 5.0
        assert config.log_level == "DEBUG"

    def test_unknown_output_validation_falls_back(self, clean_env):
        """Verify an unknown validation mode falls back to lenient."""
        clean_env.setenv("STEPBRIDGE_OUTPUT_VALIDATION", "sometimes")

        assert load_config().output_validation == OutputValidation.LENIENT

    def test_singleton(self, clean_env):
        """Verify get_config returns the same instance."""
        assert get_config() is get_config()


class TestClientConfig:

    def test_client_reads_environment(self, clean_env):
        """Verify the client picks up environment settings."""
        clean_env.setenv("STEPBRIDGE_SECRET_KEY", "from-env")
        clean_env.setenv("STEPBRIDGE_OUTPUT_VALIDATION", "strict")

        client = Client()

        assert client.secret_key == "from-env"
        assert client.output_validation == OutputValidation.STRICT

    def test_arguments_override_environment(self, clean_env):
        """Verify constructor arguments override the environment."""
        clean_env.setenv("STEPBRIDGE_SECRET_KEY", "from-env")
        clean_env.setenv("STEPBRIDGE_STRICT_AUTHENTICATION_ENABLED", "true")

        client = Client(secret_key="explicit", strict_authentication=False, output_validation="strict")

        assert client.secret_key == "explicit"
        assert client.strict_authentication is False
        assert client.executor.output_validation == OutputValidation.STRICT
