"""Unit tests for API key authentication and organization scoping."""

from unittest.mock import patch

import pytest

from app.core.auth import (
    hash_secret,
    parse_api_keys,
    require_organization_id,
    validate_api_key,
    verify_api_key,
)
from app.core.errors import AuthenticationAppError, ValidationAppError


class TestParseAPIKeys:
    def test_parse_multiple_keys(self) -> None:
        assert parse_api_keys("key1,key2,key3") == {"key1", "key2", "key3"}

    def test_parse_keys_with_whitespace(self) -> None:
        assert parse_api_keys("key1 , key2  ,  key3") == {"key1", "key2", "key3"}

    @pytest.mark.parametrize("raw", [None, "", "   ,  ,  "])
    def test_parse_empty_inputs(self, raw) -> None:
        assert parse_api_keys(raw) == set()

    def test_parse_removes_duplicate_keys(self) -> None:
        assert parse_api_keys("key1,key2,key1") == {"key1", "key2"}


class TestValidateAPIKey:
    @patch("app.core.auth.settings")
    def test_bypassed_when_auth_disabled(self, mock_settings) -> None:
        mock_settings.app.api_key_required = False

        validate_api_key("any-random-key")
        validate_api_key(None)

    @patch("app.core.auth.settings")
    def test_missing_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "valid-key"

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key("")

        assert exc_info.value.code == "missing_api_key"

    @pytest.mark.parametrize("configured", [None, ""])
    @patch("app.core.auth.settings")
    def test_no_keys_configured(self, mock_settings, configured) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = configured

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key("some-key")

        assert exc_info.value.code == "api_keys_not_configured"

    @patch("app.core.auth.settings")
    def test_accepts_valid_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = " valid-key-1 , valid-key-2 "

        validate_api_key("valid-key-1")
        validate_api_key("valid-key-2")

    @patch("app.core.auth.settings")
    def test_rejects_invalid_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "valid-key-1"

        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key(" valid-key-1 ")

        assert exc_info.value.code == "invalid_api_key"


class TestDependencies:
    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_verify_accepts_valid_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "my-valid-key"

        await verify_api_key(x_api_key="my-valid-key")

    @pytest.mark.asyncio
    @patch("app.core.auth.settings")
    async def test_verify_raises_on_invalid_key(self, mock_settings) -> None:
        mock_settings.app.api_key_required = True
        mock_settings.app.api_keys = "my-valid-key"

        with pytest.raises(AuthenticationAppError):
            await verify_api_key(x_api_key="wrong-key")

    @pytest.mark.asyncio
    async def test_organization_id_is_trimmed(self) -> None:
        assert await require_organization_id(x_organization_id="  org-9 ") == "org-9"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "", "   "])
    async def test_organization_id_required(self, value) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            await require_organization_id(x_organization_id=value)

        assert exc_info.value.code == "missing_organization_id"


def test_hash_secret_is_short_and_stable() -> None:
    assert hash_secret("abc") == hash_secret("abc")
    assert len(hash_secret("abc")) == 16
    assert "abc" not in hash_secret("abc")
