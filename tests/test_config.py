import pytest

import ai
from ai.adapters import BackendRegistry, ContentType
from ai.degraded import NO_BACKEND_MESSAGE
from ai.orchestrator import AIOrchestrator, build_orchestrator
from core.config import (
    DEFAULT_BACKENDS,
    AppSettings,
    BackendsConfig,
    get_settings,
    load_backends_config,
    reset_settings,
)
from core.errors import ConfigError


# --- Test Setup ---
@pytest.fixture
def configs_dir(tmp_path):
    path = tmp_path / "configs"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


# --- Tests ---

def test_settings_defaults():
    """Without credentials every key is None and gemini is the default."""
    settings = AppSettings(_env_file=None)
    assert settings.DEFAULT_AI_PROVIDER == "gemini"
    assert settings.GEMINI_API_KEY is None
    assert settings.OLLAMA_BASE_URL is None
    assert settings.APP_URL == "http://localhost:3000"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("CLAUDE_API_KEY", "claude-test")
    monkeypatch.setenv("GOOGLE_API_KEY", "google-test")
    monkeypatch.setenv("DEFAULT_AI_PROVIDER", "openai")

    settings = AppSettings(_env_file=None)

    assert settings.OPENAI_API_KEY == "sk-test"
    assert settings.ANTHROPIC_API_KEY == "claude-test"
    assert settings.GEMINI_API_KEY == "google-test"
    assert settings.DEFAULT_AI_PROVIDER == "openai"


def test_settings_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENROUTER_API_KEY=or-test\nOLLAMA_BASE_URL=http://ollama.local:11434\n", encoding="utf-8")

    settings = AppSettings(_env_file=str(env_file))

    assert settings.OPENROUTER_API_KEY == "or-test"
    assert settings.OLLAMA_BASE_URL == "http://ollama.local:11434"


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "first")
    first = get_settings()
    monkeypatch.setenv("OPENAI_API_KEY", "second")
    assert get_settings() is first

    reset_settings()
    assert get_settings().OPENAI_API_KEY == "second"


def test_load_shipped_backends_config():
    """Tests that the configs/backends.yml in the repository is valid."""
    config = load_backends_config()
    assert config.priority == ["gemini", "openai", "claude", "openrouter", "ollama"]
    assert config.backend("gemini").default_model == "gemini-1.5-flash"
    assert config.backend("openai").default_model == "gpt-4"
    assert config.backend("claude").default_model == "claude-3-sonnet-20240229"
    assert config.backend("openrouter").default_model == "openai/gpt-3.5-turbo"
    assert config.backend("ollama").default_model == "llama2"


def test_shipped_config_matches_builtin_defaults():
    assert load_backends_config() == BackendsConfig.model_validate(DEFAULT_BACKENDS)


def test_missing_config_uses_defaults(configs_dir):
    config = load_backends_config(str(configs_dir / "absent.yml"))
    assert config == BackendsConfig.model_validate(DEFAULT_BACKENDS)


def test_custom_priority(configs_dir):
    path = configs_dir / "backends.yml"
    path.write_text("""
priority: [ollama, openai]
backends:
  ollama:
    display_name: "Local"
    base_url: "http://localhost:11434"
    default_model: "mistral"
  openai:
    display_name: "OpenAI"
    base_url: "https://api.openai.com/v1"
    default_model: "gpt-4o"
    timeout: 10
""", encoding="utf-8")

    config = load_backends_config(str(path))

    assert config.priority == ["ollama", "openai"]
    assert config.backend("openai").timeout == 10
    assert config.backend("ollama").timeout == 30.0
    with pytest.raises(ConfigError):
        config.backend("gemini")


def test_priority_with_unknown_backend_is_rejected(configs_dir):
    path = configs_dir / "backends.yml"
    path.write_text("""
priority: [openai, mystery]
backends:
  openai:
    display_name: "OpenAI"
    base_url: "https://api.openai.com/v1"
    default_model: "gpt-4"
""", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_backends_config(str(path))


def test_invalid_yaml_is_rejected(configs_dir):
    path = configs_dir / "backends.yml"
    path.write_text("priority: [openai\nbackends: {", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_backends_config(str(path))


def test_build_orchestrator_from_settings():
    settings = AppSettings(
        _env_file=None,
        OPENAI_API_KEY="sk-test",
        OLLAMA_BASE_URL="http://ollama.local:11434",
        DEFAULT_AI_PROVIDER="claude",
    )

    orchestrator = build_orchestrator(settings, BackendsConfig.model_validate(DEFAULT_BACKENDS))

    descriptors = orchestrator.list_backends()
    assert [d.id for d in descriptors] == ["gemini", "openai", "claude", "openrouter", "ollama"]
    assert {d.id for d in descriptors if d.available} == {"openai", "ollama"}
    assert orchestrator.default_backend == "claude"


def test_build_orchestrator_with_unknown_default():
    settings = AppSettings(_env_file=None, DEFAULT_AI_PROVIDER="mystery")

    orchestrator = build_orchestrator(settings, BackendsConfig.model_validate(DEFAULT_BACKENDS))

    assert orchestrator.default_backend == "gemini"


@pytest.mark.asyncio
async def test_quick_generate_with_broken_config(monkeypatch, configs_dir):
    """ai.generate() reports no backend instead of raising on a bad config file."""
    path = configs_dir / "backends.yml"
    path.write_text("priority: [openai\nbackends: {", encoding="utf-8")
    monkeypatch.setenv("AI_CONFIG_PATH", str(path))

    result = await ai.generate("مرحبا")

    assert result.success is False
    assert result.used_backend is None
    assert result.content == NO_BACKEND_MESSAGE


@pytest.mark.asyncio
async def test_quick_generate_reuses_orchestrator(fake_backend):
    backend = fake_backend("A", content="جاهز")
    orchestrator = AIOrchestrator(BackendRegistry([("a", backend)]))

    result = await ai.generate("مرحبا", ContentType.EXECUTIVE_SUMMARY, orchestrator=orchestrator)

    assert result.content == "جاهز"
    assert backend.generate.await_args.args[1].content_type is ContentType.EXECUTIVE_SUMMARY
