"""Unit tests for settings loading."""

from chatauth.config import Settings


class TestSettings:
    def test_token_lifetime_defaults(self, monkeypatch):
        monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
        monkeypatch.delenv("REFRESH_TOKEN_EXPIRE_DAYS", raising=False)

        settings = Settings(_env_file=None)

        assert settings.access_token_expire_minutes == 15
        assert settings.refresh_token_expire_days == 30

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY_PATH", "/etc/chatauth/signing.pem")
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5")
        monkeypatch.setenv("log_level", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.private_key_path == "/etc/chatauth/signing.pem"
        assert settings.access_token_expire_minutes == 5
        assert settings.log_level == "DEBUG"
