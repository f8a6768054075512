"""Core services: chunking, repository, retrieval and document processing."""
