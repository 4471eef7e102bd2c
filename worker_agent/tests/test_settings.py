import pytest
from pydantic import ValidationError

from worker_agent.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for key in (
        "OPENROUTER_API_KEY",
        "CLOUDFLARE_API_TOKEN",
        "CLOUDFLARE_ACCOUNT_ID",
        "DEFAULT_MODEL",
        "MAX_ITERATIONS",
        "AGENT_CONFIG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    s = Settings(_env_file=None)
    assert s.default_model == "openai/gpt-4o"
    assert s.openrouter_base_url == "https://openrouter.ai/api/v1"
    assert s.cloudflare_api_base == "https://api.cloudflare.com/client/v4"
    assert s.max_iterations == 20
    assert s.index_format == "json"
    assert s.openrouter_api_key is None


def test_secrets_from_env(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-0123456789")
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "cf-token")
    monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acc123")
    s = Settings(_env_file=None)
    assert s.openrouter_api_key == "sk-or-0123456789"
    assert s.cloudflare_api_token == "cf-token"
    assert s.cloudflare_account_id == "acc123"


def test_yaml_config_file(monkeypatch, tmp_path):
    cfg = tmp_path / "agent.yaml"
    cfg.write_text("default_model: openai/gpt-4o-mini\nindex_format: html\nmax_iterations: 5\n", encoding="utf-8")
    monkeypatch.setenv("AGENT_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("MAX_ITERATIONS", "7")
    s = Settings(_env_file=None)
    assert s.default_model == "openai/gpt-4o-mini"
    assert s.index_format == "html"
    # environment wins over the YAML file
    assert s.max_iterations == 7


def test_iteration_cap_validated(monkeypatch):
    monkeypatch.setenv("MAX_ITERATIONS", "21")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_short_api_key_rejected(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "short")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
