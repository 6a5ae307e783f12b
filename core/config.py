from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigError
from core.logging import logger

# --- Base Path ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Environment-based Settings ---

class AppSettings(BaseSettings):
    """
    Credentials and endpoints for the generation backends, loaded from environment variables.
    The .env file is loaded automatically by pydantic-settings.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- General & Core ---
    LOG_LEVEL: str = Field("INFO", description="Log level for the application (e.g., DEBUG, INFO, WARNING, ERROR)")
    AI_CONFIG_PATH: Optional[str] = Field(None, description="Optional: Path to a backends YAML file.")
    DEFAULT_AI_PROVIDER: str = Field("gemini", description="Backend id used when a caller does not name one.")
    APP_URL: str = Field("http://localhost:3000", description="Public URL of the platform, sent to OpenRouter as referer.")

    # --- Hosted backends ---
    GEMINI_API_KEY: Optional[str] = Field(None, validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"))
    OPENAI_API_KEY: Optional[str] = Field(None)
    ANTHROPIC_API_KEY: Optional[str] = Field(None, validation_alias=AliasChoices("ANTHROPIC_API_KEY", "CLAUDE_API_KEY"))
    OPENROUTER_API_KEY: Optional[str] = Field(None)

    # --- Ollama / Local LLMs ---
    OLLAMA_BASE_URL: Optional[str] = Field(None, description="URL of the Ollama server. Unset disables the local backend.")
    OLLAMA_MODEL: Optional[str] = Field(None, description="Default model pulled on the Ollama server.")

# --- YAML-based Configuration Models ---

class BackendConfig(BaseModel):
    display_name: str
    base_url: str
    default_model: str
    models: List[str] = Field(default_factory=list)
    timeout: float = Field(30.0, gt=0)

class BackendsConfig(BaseModel):
    priority: List[str]
    catalog_ttl: int = Field(300, ge=0)
    backends: Dict[str, BackendConfig]

    @model_validator(mode='after')
    def _priority_is_known(self):
        unknown = [name for name in self.priority if name not in self.backends]
        if unknown:
            raise ValueError(f"priority lists unknown backends: {', '.join(unknown)}")
        if len(set(self.priority)) != len(self.priority):
            raise ValueError("priority lists a backend more than once")
        return self

    def backend(self, name: str) -> BackendConfig:
        try:
            return self.backends[name]
        except KeyError:
            raise ConfigError(f"No configuration for backend '{name}'") from None

# Used when configs/backends.yml is absent
DEFAULT_BACKENDS = {
    "priority": ["gemini", "openai", "claude", "openrouter", "ollama"],
    "catalog_ttl": 300,
    "backends": {
        "gemini": {
            "display_name": "Google Gemini",
            "base_url": "https://generativelanguage.googleapis.com/v1beta",
            "default_model": "gemini-1.5-flash",
            "models": ["gemini-1.5-pro", "gemini-1.5-flash"],
        },
        "openai": {
            "display_name": "OpenAI GPT-4",
            "base_url": "https://api.openai.com/v1",
            "default_model": "gpt-4",
            "models": ["gpt-4", "gpt-4-turbo", "gpt-3.5-turbo"],
        },
        "claude": {
            "display_name": "Anthropic Claude",
            "base_url": "https://api.anthropic.com/v1",
            "default_model": "claude-3-sonnet-20240229",
            "models": ["claude-3-opus-20240229", "claude-3-sonnet-20240229", "claude-3-haiku-20240307"],
        },
        "openrouter": {
            "display_name": "OpenRouter (Multiple Models)",
            "base_url": "https://openrouter.ai/api/v1",
            "default_model": "openai/gpt-3.5-turbo",
        },
        "ollama": {
            "display_name": "Ollama (Local Models)",
            "base_url": "http://localhost:11434",
            "default_model": "llama2",
            "timeout": 60.0,
        },
    },
}

def load_backends_config(path: Optional[str] = None) -> BackendsConfig:
    """Loads the backends YAML file and validates it with BackendsConfig."""
    config_path = Path(path) if path else BASE_DIR / 'configs' / 'backends.yml'
    if not config_path.exists():
        logger.warning(f"Backends config '{config_path}' not found, using built-in defaults")
        return BackendsConfig.model_validate(DEFAULT_BACKENDS)
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return BackendsConfig.model_validate(data or {})
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in '{config_path}': {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid backends config '{config_path}': {e}") from e

# --- Global Settings Instance ---
_settings_instance = None

def get_settings() -> AppSettings:
    """
    Returns a singleton instance of AppSettings.
    Settings are read on first use rather than on import, which keeps tests
    free to patch the environment beforehand.
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = AppSettings()
        except ValidationError as e:
            logger.critical(f"Configuration validation error: {e}")
            raise ConfigError(str(e)) from e
    return _settings_instance

def reset_settings() -> None:
    """Drops the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None
