"""Composition root wiring adapters to the core services."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..adapters.outbound.file_content_store import FileContentStore
from ..adapters.outbound.json_metadata_store import JsonMetadataStore
from ..adapters.outbound.ollama_embedding import OllamaEmbeddingAdapter
from ..adapters.outbound.sqlite_vector_store import SQLiteVectorStore
from ..adapters.outbound.text_document_processor import TextDocumentProcessor
from ..config import get_logger, settings
from ..core.services.chunking import ChunkingService
from ..core.services.document_processing import (
    DocumentProcessingService,
    DocumentProcessorRegistry,
)
from ..core.services.document_repository import DocumentRepository
from ..core.services.retrieval_service import RetrievalService

logger = logging.getLogger(__name__)


@lru_cache
def get_vector_store() -> SQLiteVectorStore:
    logger.info("Initializing SQLiteVectorStore at %s", settings.vector_db_path)
    settings.ensure_directories()
    return SQLiteVectorStore(
        settings.vector_db_path,
        embedding_dimension=settings.embedding_dimension,
        logger=get_logger("vector_store"),
    )


@lru_cache
def get_embedder() -> OllamaEmbeddingAdapter:
    logger.info("Initializing OllamaEmbeddingAdapter (%s)", settings.embedding_model)
    return OllamaEmbeddingAdapter(
        base_url=settings.ollama_base_url,
        model=settings.embedding_model,
        timeout=settings.request_timeout,
        logger=get_logger("embedding"),
    )


@lru_cache
def get_repository() -> DocumentRepository:
    logger.info("Initializing DocumentRepository...")
    settings.ensure_directories()
    return DocumentRepository(
        content_store=FileContentStore(settings.documents_dir, logger=get_logger("content")),
        vector_store=get_vector_store(),
        metadata_store=JsonMetadataStore(settings.metadata_file, logger=get_logger("metadata")),
        logger=get_logger("repository"),
    )


@lru_cache
def get_chunking_service() -> ChunkingService:
    return ChunkingService(
        settings.chunk_size,
        settings.chunk_overlap,
        logger=get_logger("chunking"),
    )


@lru_cache
def get_processing_service() -> DocumentProcessingService:
    logger.info("Initializing DocumentProcessingService...")
    registry = DocumentProcessorRegistry([TextDocumentProcessor(logger=get_logger("processor"))])
    return DocumentProcessingService(
        repository=get_repository(),
        registry=registry,
        chunker=get_chunking_service(),
        embedder=get_embedder(),
        embedding_batch_size=settings.embedding_batch_size,
        logger=get_logger("processing"),
    )


@lru_cache
def get_retrieval_service() -> RetrievalService:
    logger.info("Initializing RetrievalService...")
    return RetrievalService(
        vector_store=get_vector_store(),
        embedder=get_embedder(),
        min_similarity_score=settings.min_similarity_score,
        max_retrieved_chunks=settings.max_retrieved_chunks,
        candidate_multiplier=settings.candidate_multiplier,
        logger=get_logger("retrieval"),
    )
