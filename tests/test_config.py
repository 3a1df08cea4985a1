from progress_api import config


def test_defaults_when_env_is_empty(monkeypatch):
    for name in ("OFFLINE_MODE", "DATABASE_URL", "DEFAULT_USER_ID", "COMPLETION_THRESHOLD", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    settings = config.load_settings()

    assert settings.offline_mode is False
    assert settings.mode == "online"
    assert settings.database_url == config.DEFAULT_DATABASE_URL
    assert settings.default_user_id == "test-user"
    assert settings.completion_threshold == 9.0
    assert settings.cors_origins == ["http://localhost:5173"]


def test_offline_flag_and_overrides(monkeypatch):
    monkeypatch.setenv("OFFLINE_MODE", "true")
    monkeypatch.setenv("DEFAULT_USER_ID", "learner-7")
    monkeypatch.setenv("COMPLETION_THRESHOLD", "8.5")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = config.load_settings()

    assert settings.offline_mode is True
    assert settings.mode == "offline"
    assert settings.default_user_id == "learner-7"
    assert settings.completion_threshold == 8.5
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_only_literal_true_enables_offline_mode(monkeypatch):
    monkeypatch.setenv("OFFLINE_MODE", "1")
    assert config.load_settings().offline_mode is False


def test_bad_threshold_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("COMPLETION_THRESHOLD", "nine")
    assert config.load_settings().completion_threshold == 9.0
