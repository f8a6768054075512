"""Embedding Port Interface."""

from abc import ABC, abstractmethod


class EmbeddingPort(ABC):
    """Abstract interface for embedding functions."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]: ...

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(text) for text in texts]
