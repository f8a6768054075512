"""Outbound adapters: SQLite vectors, file content, JSON metadata, Ollama embeddings."""
