"""ragvault: local document library with chunking, embeddings and semantic search."""

__version__ = "0.1.0"
