import pytest

from toddler_fun.config import DEFAULT_DATABASE_URL, Settings, is_truthy, load_env


@pytest.mark.parametrize("value", ["true", "TRUE", "True", "1", "yes", "YES", " yes "])
def test_truthy_values(value):
    assert is_truthy(value)


@pytest.mark.parametrize("value", [None, "", "false", "0", "no", "on", "y", "enabled"])
def test_falsy_values(value):
    assert not is_truthy(value)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("APP_ENV", "ENV", "PYTHON_ENV", "ALLOW_PRODUCTION_WRITES", "DATABASE_URL", "CORS_ORIGINS"):
        # setenv first so values loaded from .env files are undone afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.environment == "development"
    assert not settings.is_production
    assert settings.writes_enabled
    assert settings.cors_origins == ["*"]


def test_production_without_override(clean_env):
    clean_env.setenv("APP_ENV", "Production")
    clean_env.setenv("ALLOW_PRODUCTION_WRITES", "maybe")
    settings = Settings.from_env()
    assert settings.is_production
    assert not settings.allow_production_writes
    assert not settings.writes_enabled


def test_production_with_override(clean_env):
    clean_env.setenv("ENV", "prod")
    clean_env.setenv("ALLOW_PRODUCTION_WRITES", "Yes")
    settings = Settings.from_env()
    assert settings.is_production
    assert settings.writes_enabled


def test_cors_origins_split(clean_env):
    clean_env.setenv("CORS_ORIGINS", "http://localhost:3000, https://fun.example")
    assert Settings.from_env().cors_origins == ["http://localhost:3000", "https://fun.example"]


def test_load_env_prefers_environment_file(clean_env, tmp_path):
    (tmp_path / ".env.local").write_text("DATABASE_URL=sqlite:///./local.db\n")
    (tmp_path / ".env").write_text("DATABASE_URL=sqlite:///./fallback.db\n")
    assert load_env(tmp_path) == tmp_path / ".env.local"
    assert Settings.from_env().database_url == "sqlite:///./local.db"


def test_load_env_falls_back_to_dotenv(clean_env, tmp_path):
    clean_env.setenv("APP_ENV", "production")
    (tmp_path / ".env").write_text("ALLOW_PRODUCTION_WRITES=yes\n")
    assert load_env(tmp_path) == tmp_path / ".env"
    assert Settings.from_env().writes_enabled


def test_load_env_without_files(clean_env, tmp_path):
    assert load_env(tmp_path) is None
