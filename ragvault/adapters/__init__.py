"""Adapters connecting the core to storage, embeddings and the CLI."""
