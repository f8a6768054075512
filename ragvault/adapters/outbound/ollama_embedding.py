"""Embedding client for a local Ollama server."""

import asyncio
import logging
from typing import Any

import requests

from ...core.domain.exceptions import EmbeddingError, EmbeddingUnavailableError
from ...core.ports.embedding_port import EmbeddingPort


class OllamaEmbeddingAdapter(EmbeddingPort):
    """Generates embeddings through Ollama's ``/api/embeddings`` endpoint.

    Requests run in a worker thread. Failures are not retried.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        timeout: float = 60.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._logger = logger or logging.getLogger(__name__)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "ragvault/0.1"})

    def __enter__(self) -> "OllamaEmbeddingAdapter":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    async def embed(self, text: str) -> list[float]:
        """Embed one text.

        Raises:
            EmbeddingUnavailableError: The server is unreachable or answered
                with an error status.
            EmbeddingError: The response carried no embedding.
        """
        return await asyncio.to_thread(self._embed_sync, text)

    def _embed_sync(self, text: str) -> list[float]:
        url = f"{self.base_url}/api/embeddings"
        context = {"url": url, "model": self.model}
        try:
            response = self.session.post(
                url, json={"model": self.model, "prompt": text}, timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            self._logger.error("Embedding request to %s failed: %s", url, e)
            raise EmbeddingUnavailableError(
                "Embedding service unavailable", cause=e, context=context
            ) from e
        except ValueError as e:
            raise EmbeddingError("Embedding response is not valid JSON", cause=e, context=context) from e

        embedding = payload.get("embedding") if isinstance(payload, dict) else None
        if not embedding:
            raise EmbeddingError("Embedding response contained no vector", context=context)
        return [float(x) for x in embedding]
