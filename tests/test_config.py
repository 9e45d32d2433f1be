"""Tests for client configuration module."""

from unittest import mock

import pytest

from linkedin_client.config import LinkedinClientConfig
from linkedin_client.constants import DEFAULT_OAUTH_SCOPES
from linkedin_client.exceptions import ConfigurationError, MissingParameterError


class TestLinkedinClientConfig:
    """Tests for LinkedinClientConfig class."""

    def test_config_with_required_params(self):
        """Config can be created with just required parameters."""
        config = LinkedinClientConfig(
            client_id="test_id", client_secret="test_secret", oauth_callback_url="https://cb"
        )

        assert config.client_id == "test_id"
        assert config.client_secret == "test_secret"
        assert config.oauth_callback_url == "https://cb"
        assert config.retry_attempts == 3
        assert config.default_delay_between_requests_ms == 500
        assert config.no_retries is False
        assert config.no_validate_csrf is False
        assert config.nonce_expiration_ms == 60000
        assert config.api_version == "202311"
        assert config.restli_protocol_version == "2.0.0"

    def test_default_scopes_when_none_given(self):
        """Default scope set is used when oauth_scopes is omitted."""
        config = LinkedinClientConfig(client_id="a", client_secret="b", oauth_callback_url="c")

        assert config.scopes == list(DEFAULT_OAUTH_SCOPES)

    def test_custom_scopes(self):
        """Configured scopes replace the default set."""
        config = LinkedinClientConfig(
            client_id="a", client_secret="b", oauth_callback_url="c", oauth_scopes=["openid"]
        )

        assert config.scopes == ["openid"]

    def test_missing_single_parameter(self):
        """A missing required field is named in the error."""
        with pytest.raises(MissingParameterError, match="client_secret") as exc_info:
            LinkedinClientConfig(client_id="a", client_secret="", oauth_callback_url="c")

        assert exc_info.value.parameter_list == ["client_secret"]
        assert exc_info.value.code == "MISSING_PARAMETER"

    def test_missing_parameters_are_all_listed(self):
        """Every absent required field is reported at once."""
        with pytest.raises(MissingParameterError) as exc_info:
            LinkedinClientConfig(client_id="", client_secret="", oauth_callback_url="")

        assert exc_info.value.parameter_list == [
            "client_id",
            "client_secret",
            "oauth_callback_url",
        ]
        assert exc_info.value.data == {"parameter_list": exc_info.value.parameter_list}

    def test_negative_retry_attempts_rejected(self):
        """retry_attempts cannot be negative."""
        with pytest.raises(ConfigurationError, match="retry_attempts"):
            LinkedinClientConfig(
                client_id="a", client_secret="b", oauth_callback_url="c", retry_attempts=-1
            )

    def test_non_positive_nonce_expiration_rejected(self):
        """nonce_expiration_ms must be positive."""
        with pytest.raises(ConfigurationError, match="nonce_expiration_ms"):
            LinkedinClientConfig(
                client_id="a", client_secret="b", oauth_callback_url="c", nonce_expiration_ms=0
            )

    def test_delay_conversions(self):
        """Millisecond settings are exposed in seconds."""
        config = LinkedinClientConfig(
            client_id="a",
            client_secret="b",
            oauth_callback_url="c",
            default_delay_between_requests_ms=250,
            nonce_expiration_ms=10,
        )

        assert config.default_delay_seconds == 0.25
        assert config.nonce_expiration_seconds == 0.01

    @mock.patch.dict(
        "os.environ",
        {
            "LINKEDIN_CLIENT_ID": "env_id",
            "LINKEDIN_CLIENT_SECRET": "env_secret",
            "LINKEDIN_OAUTH_CALLBACK_URL": "https://env/cb",
            "LINKEDIN_OAUTH_SCOPES": "openid profile",
            "LINKEDIN_RETRY_ATTEMPTS": "5",
            "LINKEDIN_NO_RETRIES": "true",
            "LINKEDIN_NONCE_EXPIRATION_MS": "1000",
        },
        clear=True,
    )
    def test_from_env(self):
        """from_env loads every recognised variable."""
        config = LinkedinClientConfig.from_env()

        assert config.client_id == "env_id"
        assert config.client_secret == "env_secret"
        assert config.oauth_callback_url == "https://env/cb"
        assert config.scopes == ["openid", "profile"]
        assert config.retry_attempts == 5
        assert config.no_retries is True
        assert config.no_validate_csrf is False
        assert config.nonce_expiration_ms == 1000

    @mock.patch.dict("os.environ", {"LINKEDIN_CLIENT_ID": "env_id"}, clear=True)
    def test_from_env_missing_credentials(self):
        """from_env reports every missing required variable."""
        with pytest.raises(MissingParameterError) as exc_info:
            LinkedinClientConfig.from_env()

        assert exc_info.value.parameter_list == ["client_secret", "oauth_callback_url"]
