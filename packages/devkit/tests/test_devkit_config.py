from devkit.config import load_settings


def test_load_settings_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://example")
    monkeypatch.setenv("CENTER_DEFAULT_RADIUS_KM", "25")
    settings = load_settings("center-service")

    assert settings.SERVICE_NAME == "center-service"
    assert settings.DATABASE_URL == "postgresql://example"
    assert settings.CENTER_DEFAULT_RADIUS_KM == 25.0


def test_load_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("CENTER_DEFAULT_RADIUS_KM", raising=False)
    monkeypatch.delenv("CENTER_DEFAULT_LIST_LIMIT", raising=False)
    monkeypatch.delenv("CENTER_DEFAULT_NEAREST_LIMIT", raising=False)
    settings = load_settings("center-service")

    assert settings.DATABASE_URL is None
    assert settings.CENTER_DEFAULT_RADIUS_KM == 50.0
    assert settings.CENTER_DEFAULT_LIST_LIMIT == 100
    assert settings.CENTER_DEFAULT_NEAREST_LIMIT == 5
