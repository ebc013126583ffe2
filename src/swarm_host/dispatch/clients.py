"""
Model Clients - Generation backend clients and the per-model client cache.

The cache is owned by the dispatcher and injected at construction; there is
no process-wide client registry.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from google import genai
from google.genai import types

from ..config import BackendConfig

logger = logging.getLogger(__name__)

# Model identifiers that mean "use the default model"
DEFAULT_MODEL_SENTINELS = frozenset({"", "n/a", "none", "default"})


@dataclass(frozen=True)
class GenerationConfig:
    """Fixed generation parameters: low randomness, bounded output."""
    temperature: float = 0.2
    max_output_tokens: int = 2048

    @classmethod
    def from_backend(cls, config: BackendConfig) -> "GenerationConfig":
        return cls(temperature=config.temperature, max_output_tokens=config.max_output_tokens)


class ModelClient(Protocol):
    """A client bound to one model identifier."""

    model: str

    async def generate(self, system_text: str, task_text: str) -> Optional[str]:
        """Return the first generated text fragment, or None if nothing was generated."""
        ...


ClientFactory = Callable[[str], ModelClient]


def first_candidate_text(response: Any) -> Optional[str]:
    """Extract the first text part of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None

    return getattr(parts[0], "text", None)


class GeminiModelClient:
    """Gemini model client on the google-genai SDK."""

    def __init__(self, client: genai.Client, model: str, generation_config: GenerationConfig):
        self.client = client
        self.model = model
        self.generation_config = generation_config

    async def generate(self, system_text: str, task_text: str) -> Optional[str]:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=task_text,
            config=types.GenerateContentConfig(
                system_instruction=system_text,
                temperature=self.generation_config.temperature,
                max_output_tokens=self.generation_config.max_output_tokens,
            ),
        )
        return first_candidate_text(response)


class GeminiClientFactory:
    """
    Creates Gemini model clients against Vertex AI.

    The underlying SDK client is created on first use and shared by every
    model client this factory produces.
    """

    def __init__(self, config: BackendConfig):
        self.config = config
        self.generation_config = GenerationConfig.from_backend(config)
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                vertexai=True,
                project=self.config.project_id,
                location=self.config.location,
            )
            logger.info(
                f"Vertex AI client initialized (project={self.config.project_id or '<adc>'}, "
                f"location={self.config.location})"
            )
        return self._client

    def __call__(self, model: str) -> ModelClient:
        return GeminiModelClient(self._get_client(), model, self.generation_config)


class ModelClientCache:
    """
    One live client per resolved model identifier.

    Client creation is synchronous, so concurrent invocations on one event
    loop cannot interleave inside ``get``.
    """

    def __init__(self, factory: ClientFactory, default_model: str):
        if not default_model:
            raise ValueError("default_model is required")
        self.factory = factory
        self.default_model = default_model
        self._clients: dict[str, ModelClient] = {}

    def resolve(self, model_identifier: Optional[str]) -> str:
        """Resolve a contract's model identifier, mapping empty/sentinel values to the default."""
        if model_identifier is None:
            return self.default_model
        model = model_identifier.strip()
        if model.lower() in DEFAULT_MODEL_SENTINELS:
            return self.default_model
        return model

    def get(self, model_identifier: Optional[str]) -> ModelClient:
        """Get the cached client for a model, creating it on first access."""
        model = self.resolve(model_identifier)
        client = self._clients.get(model)
        if client is None:
            client = self.factory(model)
            self._clients[model] = client
            logger.debug(f"Created model client for {model}")
        return client

    def models(self) -> list[str]:
        return list(self._clients.keys())

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, model_identifier: str) -> bool:
        return self.resolve(model_identifier) in self._clients
