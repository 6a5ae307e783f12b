"""AI Provider Adapters for the generation backends."""
from typing import Any, Callable, Dict, List, Optional

import httpx

from ai.adapters.base import RECOVERABLE_ERRORS, BaseBackend
from ai.adapters.cache import CatalogCache
from ai.adapters.types import BackendId, Generation, GenerationOptions
from ai.prompts import PromptTemplates
from core.config import DEFAULT_BACKENDS, AppSettings, BackendConfig, BackendsConfig
from core.logging import logger


def _default_config(backend_id: BackendId) -> BackendConfig:
    return BackendConfig.model_validate(DEFAULT_BACKENDS["backends"][backend_id.value])


class GeminiBackend(BaseBackend):
    """Google Gemini generateContent API. The system prompt travels in the prompt body."""

    backend_id = BackendId.GEMINI.value

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[BackendConfig] = None,
        templates: Optional[PromptTemplates] = None,
    ):
        super().__init__(config or _default_config(BackendId.GEMINI), templates)
        self.api_key = api_key
        if not api_key:
            logger.warning("GEMINI_API_KEY not found. Gemini features will be disabled.")

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> Generation:
        """Gemini content generation."""
        options = options or GenerationOptions()
        if not self.is_available():
            return self._degraded(options, "GEMINI_API_KEY not set")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            headers = {
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json"
            }

            payload = {
                "contents": [{
                    "role": "user",
                    "parts": [{"text": self.templates.compose(prompt, options.content_type)}]
                }],
                "generationConfig": {
                    "temperature": self._temperature(options),
                    "maxOutputTokens": self._max_tokens(options),
                }
            }

            try:
                response = await client.post(
                    f"{self.base_url}/models/{self._model(options)}:generateContent",
                    headers=headers,
                    json=payload
                )
                response.raise_for_status()

                data = response.json()
                parts = data["candidates"][0]["content"]["parts"]
                text = self._require_text("".join(part.get("text", "") for part in parts))

            except RECOVERABLE_ERRORS as e:
                logger.error(f"Gemini API error: {e}")
                return self._degraded(options, str(e))

        return Generation(content=text)


class OpenAIBackend(BaseBackend):
    """OpenAI chat completions (GPT-4, GPT-3.5, etc.)."""

    backend_id = BackendId.OPENAI.value

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[BackendConfig] = None,
        templates: Optional[PromptTemplates] = None,
    ):
        super().__init__(config or _default_config(BackendId.OPENAI), templates)
        self.api_key = api_key

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> Generation:
        """OpenAI chat completion."""
        options = options or GenerationOptions()
        if not self.is_available():
            return self._degraded(options, "OPENAI_API_KEY not set")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }

            payload = {
                "model": self._model(options),
                "messages": _chat_messages(self.templates.system_prompt(options.content_type), prompt),
                "temperature": self._temperature(options),
                "max_tokens": self._max_tokens(options),
            }

            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload
                )
                response.raise_for_status()

                data = response.json()
                text = self._require_text(data["choices"][0]["message"]["content"])

            except RECOVERABLE_ERRORS as e:
                logger.error(f"OpenAI API error: {e}")
                return self._degraded(options, str(e))

        return Generation(content=text)


class ClaudeBackend(BaseBackend):
    """Anthropic messages API (Claude 3 Opus, Sonnet, etc.)."""

    backend_id = BackendId.CLAUDE.value
    api_version = "2023-06-01"

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[BackendConfig] = None,
        templates: Optional[PromptTemplates] = None,
    ):
        super().__init__(config or _default_config(BackendId.CLAUDE), templates)
        self.api_key = api_key

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> Generation:
        """Anthropic chat completion."""
        options = options or GenerationOptions()
        if not self.is_available():
            return self._degraded(options, "ANTHROPIC_API_KEY not set")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            headers = {
                "x-api-key": self.api_key,
                "anthropic-version": self.api_version,
                "Content-Type": "application/json"
            }

            payload = {
                "model": self._model(options),
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self._max_tokens(options),
                "temperature": self._temperature(options),
            }

            system_prompt = self.templates.system_prompt(options.content_type)
            if system_prompt:
                payload["system"] = system_prompt

            try:
                response = await client.post(
                    f"{self.base_url}/messages",
                    headers=headers,
                    json=payload
                )
                response.raise_for_status()

                data = response.json()
                blocks = [block for block in data["content"] if block.get("type") == "text"]
                text = self._require_text(blocks[0]["text"] if blocks else None)

            except RECOVERABLE_ERRORS as e:
                logger.error(f"Anthropic API error: {e}")
                return self._degraded(options, str(e))

        return Generation(content=text)


class OpenRouterBackend(BaseBackend):
    """OpenRouter gateway: one key, many hosted models, OpenAI-shaped payloads."""

    backend_id = BackendId.OPENROUTER.value
    app_title = "Feasibility Study Platform"

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[BackendConfig] = None,
        templates: Optional[PromptTemplates] = None,
        app_url: str = "http://localhost:3000",
        catalog: Optional[CatalogCache] = None,
    ):
        super().__init__(config or _default_config(BackendId.OPENROUTER), templates)
        self.api_key = api_key
        self.app_url = app_url
        self._catalog = catalog or CatalogCache()

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> Generation:
        """OpenRouter chat completion."""
        options = options or GenerationOptions()
        if not self.is_available():
            return self._degraded(options, "OPENROUTER_API_KEY not set")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": self.app_url,
                "X-Title": self.app_title,
            }

            payload = {
                "model": self._model(options),
                "messages": _chat_messages(self.templates.system_prompt(options.content_type), prompt),
                "temperature": self._temperature(options),
                "max_tokens": self._max_tokens(options),
            }

            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload
                )
                response.raise_for_status()

                data = response.json()
                text = self._require_text(data["choices"][0]["message"]["content"])

            except RECOVERABLE_ERRORS as e:
                logger.error(f"OpenRouter API error: {e}")
                return self._degraded(options, str(e))

        return Generation(content=text)

    async def list_models(self) -> List[str]:
        """Model ids currently offered by the gateway; empty on any failure."""
        if not self.is_available():
            return []

        async with self._catalog.fetch_lock(self.backend_id):
            cached = await self._catalog.get(self.backend_id)
            if cached is not None:
                return cached

            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(
                        f"{self.base_url}/models",
                        headers={"Authorization": f"Bearer {self.api_key}"}
                    )
                    response.raise_for_status()
                    data = response.json()
                models = [model["id"] for model in data.get("data") or []]
            except RECOVERABLE_ERRORS as e:
                logger.error(f"Failed to fetch OpenRouter models: {e}")
                return []

            await self._catalog.set(self.backend_id, models)
        return models


class OllamaBackend(BaseBackend):
    """Ollama local model provider."""

    backend_id = BackendId.OLLAMA.value
    degraded_hint = "يرجى التأكد من تشغيل خادم Ollama المحلي"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        config: Optional[BackendConfig] = None,
        templates: Optional[PromptTemplates] = None,
        catalog: Optional[CatalogCache] = None,
    ):
        # Ollama doesn't need API key
        super().__init__(config or _default_config(BackendId.OLLAMA), templates)
        self.configured_url = base_url
        self.model = model
        self._catalog = catalog or CatalogCache()

    @property
    def base_url(self) -> str:
        return (self.configured_url or self.config.base_url).rstrip("/")

    @property
    def default_model(self) -> str:
        return self.model or self.config.default_model

    def is_available(self) -> bool:
        return bool(self.configured_url)

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> Generation:
        """Ollama completion."""
        options = options or GenerationOptions()
        if not self.is_available():
            return self._degraded(options, "OLLAMA_BASE_URL not set")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            payload = {
                "model": self._model(options),
                "prompt": self.templates.compose(prompt, options.content_type),
                "stream": False,
                "options": {
                    "temperature": self._temperature(options),
                    "num_predict": self._max_tokens(options),
                }
            }

            try:
                response = await client.post(
                    f"{self.base_url}/api/generate",
                    json=payload
                )
                response.raise_for_status()

                data = response.json()
                text = self._require_text(data["response"])

            except RECOVERABLE_ERRORS as e:
                logger.error(f"Ollama API error: {e}")
                return self._degraded(options, str(e))

        return Generation(content=text)

    async def list_models(self) -> List[str]:
        """Models pulled on the Ollama server; empty on any failure."""
        async with self._catalog.fetch_lock(self.backend_id):
            cached = await self._catalog.get(self.backend_id)
            if cached is not None:
                return cached

            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(f"{self.base_url}/api/tags")
                    response.raise_for_status()
                    data = response.json()
                models = [model["name"] for model in data.get("models") or []]
            except RECOVERABLE_ERRORS as e:
                logger.error(f"Failed to fetch Ollama models: {e}")
                return []

            await self._catalog.set(self.backend_id, models)
        return models

    async def is_server_running(self) -> bool:
        """Live health check of the Ollama server. Diagnostics only, never used for routing."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/api/tags")
            return response.is_success
        except (httpx.HTTPError, httpx.InvalidURL):
            return False


def _chat_messages(system_prompt: Optional[str], prompt: str) -> List[Dict[str, str]]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


# Provider factory
def create_backend(
    backend_id: str,
    settings: AppSettings,
    config: BackendsConfig,
    templates: Optional[PromptTemplates] = None,
    catalog: Optional[CatalogCache] = None,
) -> BaseBackend:
    """Create a backend instance by id from settings and the backends config."""
    templates = templates or PromptTemplates()
    catalog = catalog or CatalogCache(ttl_sec=config.catalog_ttl)

    builders: Dict[str, Callable[[BackendConfig], Any]] = {
        BackendId.GEMINI.value: lambda cfg: GeminiBackend(
            api_key=settings.GEMINI_API_KEY, config=cfg, templates=templates
        ),
        BackendId.OPENAI.value: lambda cfg: OpenAIBackend(
            api_key=settings.OPENAI_API_KEY, config=cfg, templates=templates
        ),
        BackendId.CLAUDE.value: lambda cfg: ClaudeBackend(
            api_key=settings.ANTHROPIC_API_KEY, config=cfg, templates=templates
        ),
        BackendId.OPENROUTER.value: lambda cfg: OpenRouterBackend(
            api_key=settings.OPENROUTER_API_KEY,
            config=cfg,
            templates=templates,
            app_url=settings.APP_URL,
            catalog=catalog,
        ),
        BackendId.OLLAMA.value: lambda cfg: OllamaBackend(
            base_url=settings.OLLAMA_BASE_URL,
            model=settings.OLLAMA_MODEL,
            config=cfg,
            templates=templates,
            catalog=catalog,
        ),
    }

    builder = builders.get(backend_id.lower())
    if not builder:
        raise ValueError(f"Unknown backend type: {backend_id}")

    return builder(config.backend(backend_id.lower()))
