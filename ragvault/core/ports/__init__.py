"""Port interfaces the core services depend on."""

from .chunking_port import ChunkingStrategy
from .content_store_port import ContentStorePort
from .document_processor_port import DocumentProcessorPort
from .embedding_port import EmbeddingPort
from .metadata_store_port import MetadataStorePort
from .vector_store_port import VectorStorePort

__all__ = [
    "ChunkingStrategy",
    "ContentStorePort",
    "DocumentProcessorPort",
    "EmbeddingPort",
    "MetadataStorePort",
    "VectorStorePort",
]
