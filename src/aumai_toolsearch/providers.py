"""Embedding providers.

The semantic engine talks to an :class:`EmbeddingProvider`; the only bundled
implementation calls an Ollama server over HTTP.  Providers are constructed
explicitly and passed to the engine, there is no process-wide default client.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol, runtime_checkable

import httpx

from aumai_toolsearch.errors import ProviderUnavailableError

__all__ = [
    "DEFAULT_EMBEDDING_MODEL",
    "DEFAULT_OLLAMA_HOST",
    "EmbeddingProvider",
    "OllamaEmbeddingProvider",
    "default_embedding_model",
]

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_EMBEDDING_MODEL = "nomic-embed-text-v2-moe"
DEFAULT_TIMEOUT = 60.0


def default_embedding_model() -> str:
    """Embedding model from ``$OLLAMA_MODEL``, else :data:`DEFAULT_EMBEDDING_MODEL`."""
    return os.getenv("OLLAMA_MODEL") or DEFAULT_EMBEDDING_MODEL


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Batch text-to-vector API.

    ``embed`` must preserve order: ``vectors[i]`` belongs to ``texts[i]``.
    """

    async def embed(self, texts: list[str], model: str) -> list[list[float]]: ...

    async def embed_one(self, text: str, model: str) -> list[float]: ...


class OllamaEmbeddingProvider:
    """Embedding provider backed by Ollama's ``/api/embed`` endpoint.

    Args:
        host: Server URL; defaults to ``$OLLAMA_HOST`` or ``http://localhost:11434``.
        timeout: Request timeout in seconds.
        client: Pre-built client to use.  A client created here is closed by
            :meth:`aclose`; a supplied one is left to its owner.
    """

    def __init__(
        self,
        host: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.host = (host or os.getenv("OLLAMA_HOST") or DEFAULT_OLLAMA_HOST).rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def embed(self, texts: list[str], model: str) -> list[list[float]]:
        """Embed *texts* with *model* in a single request.

        Raises:
            ProviderUnavailableError: On transport errors, non-2xx responses or
                a response that does not hold one vector per input text.
        """
        if not texts:
            return []

        body = await self._post("/api/embed", {"model": model, "input": texts})
        embeddings = body.get("embeddings")
        if not isinstance(embeddings, list) or len(embeddings) != len(texts):
            got = len(embeddings) if isinstance(embeddings, list) else None
            raise ProviderUnavailableError(
                f"Ollama returned {got} embeddings for {len(texts)} inputs",
                context={"host": self.host, "model": model},
            )
        try:
            vectors = [[float(value) for value in vector] for vector in embeddings]
        except (TypeError, ValueError) as exc:
            raise ProviderUnavailableError(
                f"Ollama returned malformed embeddings for {model}: {exc}",
                context={"host": self.host, "model": model},
            ) from exc
        logger.debug(f"Embedded {len(texts)} text(s) with {model}")
        return vectors

    async def embed_one(self, text: str, model: str) -> list[float]:
        return (await self.embed([text], model))[0]

    async def check_connection(self) -> bool:
        """Return True when the Ollama server answers ``/api/tags``."""
        try:
            response = await self.client.get(f"{self.host}/api/tags")
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(f"Ollama at {self.host} is unreachable: {exc}")
            return False
        return True

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> OllamaEmbeddingProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.host}{path}"
        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailableError(
                f"Ollama returned HTTP {exc.response.status_code} for {url}",
                context={"host": self.host, "status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                f"Ollama request to {url} failed: {exc}",
                context={"host": self.host},
            ) from exc
        except ValueError as exc:
            raise ProviderUnavailableError(
                f"Ollama returned invalid JSON from {url}",
                context={"host": self.host},
            ) from exc

        if not isinstance(body, dict):
            raise ProviderUnavailableError(
                f"Unexpected response body from {url}", context={"host": self.host}
            )
        return body
