import pytest
from pydantic import ValidationError

from jsonapi_resolver.config import DEFAULT_BASE_URL, ClientSettings


@pytest.mark.unit
def test_defaults():
    settings = ClientSettings.load()

    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.api_root == f"{DEFAULT_BASE_URL}/api/v1"
    assert settings.token is None
    assert settings.default_page_size == 20
    assert settings.max_page_size == 50
    assert settings.log_json is False


@pytest.mark.unit
def test_reads_environment(monkeypatch):
    monkeypatch.setenv("INVENTORY_API_BASE_URL", "https://erp.example.com/")
    monkeypatch.setenv("INVENTORY_API_API_PREFIX", "api/v2/")
    monkeypatch.setenv("INVENTORY_API_TOKEN", "abc")
    monkeypatch.setenv("INVENTORY_API_LOG_LEVEL", "debug")
    monkeypatch.setenv("INVENTORY_API_TIMEOUT_SECONDS", "2.5")

    settings = ClientSettings.load()

    assert settings.api_root == "https://erp.example.com/api/v2"
    assert settings.token == "abc"
    assert settings.log_level == "DEBUG"
    assert settings.timeout_seconds == 2.5


@pytest.mark.unit
def test_reads_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("INVENTORY_API_TOKEN=from-dotenv\n", encoding="utf-8")

    assert ClientSettings.load().token == "from-dotenv"


@pytest.mark.unit
def test_empty_prefix_is_allowed():
    assert ClientSettings(api_prefix="/").api_root == DEFAULT_BASE_URL


@pytest.mark.unit
def test_rejects_inconsistent_page_sizes():
    with pytest.raises(ValidationError):
        ClientSettings(default_page_size=80, max_page_size=50)
    with pytest.raises(ValidationError):
        ClientSettings(timeout_seconds=0)
