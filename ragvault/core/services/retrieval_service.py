"""Retrieves the chunks most relevant to a query."""

import logging
from collections.abc import Sequence

from ..domain import DocumentChunk, SearchResult
from ..domain.exceptions import EmptyQueryError
from ..ports.embedding_port import EmbeddingPort
from ..ports.vector_store_port import VectorStorePort
from .similarity import cosine_similarity


class RetrievalService:
    """Embeds a query, searches the vector store and filters by score."""

    def __init__(
        self,
        vector_store: VectorStorePort,
        embedder: EmbeddingPort,
        min_similarity_score: float = 0.1,
        max_retrieved_chunks: int = 4,
        candidate_multiplier: int = 2,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the retriever.

        Args:
            vector_store: Store to search.
            embedder: Embedding function used for queries.
            min_similarity_score: Results scoring below this are dropped.
            max_retrieved_chunks: Result cap when the caller gives none.
            candidate_multiplier: Candidates fetched per requested result,
                so filtering still leaves enough to fill the cap.
            logger: Diagnostics sink; defaults to this module's logger.
        """
        self.vector_store = vector_store
        self.embedder = embedder
        self.min_similarity_score = min_similarity_score
        self.max_retrieved_chunks = max_retrieved_chunks
        self.candidate_multiplier = max(1, candidate_multiplier)
        self._logger = logger or logging.getLogger(__name__)

    async def retrieve_relevant_chunks(
        self,
        query: str,
        document_ids: Sequence[str] | None = None,
        max_results: int = 0,
    ) -> list[SearchResult]:
        """Return the best chunks for a query, highest score first.

        Args:
            query: Natural language query.
            document_ids: Restrict the search to these documents. None or
                empty searches every stored chunk.
            max_results: Result cap; values <= 0 use max_retrieved_chunks.

        Returns:
            At most max_results results scoring at least min_similarity_score.

        Raises:
            EmptyQueryError: If the query is blank.
            EmbeddingError: If the query cannot be embedded.
        """
        if not query or not query.strip():
            raise EmptyQueryError("Query cannot be empty")

        limit = max_results if max_results > 0 else self.max_retrieved_chunks
        candidates = limit * self.candidate_multiplier

        query_vector = await self.embedder.embed(query)

        if document_ids:
            results = await self.vector_store.search_in_documents(
                query_vector, document_ids, candidates
            )
        else:
            results = await self.vector_store.search(query_vector, candidates)

        relevant = [r for r in results if r.score >= self.min_similarity_score][:limit]
        self._logger.info(
            "Retrieved %d of %d candidates above %.2f",
            len(relevant),
            len(results),
            self.min_similarity_score,
            extra={"operation": "retrieve_relevant_chunks"},
        )
        return relevant

    async def calculate_relevance_score(self, query: str, chunk: DocumentChunk) -> float:
        """Cosine similarity between a query and one chunk.

        The chunk's stored embedding is used when present; otherwise its
        content is embedded on the fly.
        """
        if not query or not query.strip():
            raise EmptyQueryError("Query cannot be empty")

        query_vector = await self.embedder.embed(query)
        chunk_vector = chunk.embedding if chunk.has_embedding else await self.embedder.embed(
            chunk.content
        )
        return cosine_similarity(query_vector, chunk_vector)
