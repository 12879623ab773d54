"""Unit tests for production wiring in chatauth.main."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from cryptography.hazmat.primitives import serialization

from chatauth.config import Settings
from chatauth.errors import KeyLoadError
from chatauth.main import build_auth_service
from chatauth.repositories import PostgresRefreshTokenRepository, PostgresUserRepository


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestBuildAuthService:
    def test_wires_key_and_ttls(self, tmp_path, key_manager):
        key_path = tmp_path / "private.pem"
        key_path.write_bytes(
            key_manager.private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )
        settings = _settings(
            private_key_path=str(key_path),
            access_token_expire_minutes=10,
            refresh_token_expire_days=7,
        )

        with patch("chatauth.main.get_settings", return_value=settings):
            service = build_auth_service()

        assert service.token_service.key_manager.kid == key_manager.kid
        assert service.token_service.access_token_ttl == timedelta(minutes=10)
        assert service.token_service.refresh_token_ttl == timedelta(days=7)
        assert isinstance(service.user_repo, PostgresUserRepository)
        assert isinstance(service.token_service.refresh_token_repo, PostgresRefreshTokenRepository)

    def test_missing_key_is_fatal(self, tmp_path):
        settings = _settings(private_key_path=str(tmp_path / "absent.pem"))

        with patch("chatauth.main.get_settings", return_value=settings):
            with pytest.raises(KeyLoadError):
                build_auth_service()
