"""Configuration management for ragvault."""

from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field can be overridden with a ``RAGVAULT_`` prefixed variable,
    e.g. ``RAGVAULT_CHUNK_SIZE=800``.
    """

    model_config = SettingsConfigDict(
        env_prefix="RAGVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage roots
    data_dir: Path = Path("./data")

    # Chunking
    chunk_size: int = 500
    chunk_overlap: int = 100

    # Retrieval
    max_retrieved_chunks: int = 4
    min_similarity_score: float = 0.1
    candidate_multiplier: int = 2

    # Embeddings
    embedding_dimension: int | None = None
    embedding_batch_size: int = 10
    ollama_base_url: str = "http://localhost:11434"
    embedding_model: str = "nomic-embed-text"
    request_timeout: float = 60.0

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    log_json: bool = False

    @field_validator("ollama_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("min_similarity_score", mode="after")
    @classmethod
    def check_score_range(cls, value: float) -> float:
        """Cosine similarity lives in [-1, 1]; a threshold outside it is meaningless."""
        if not -1.0 <= value <= 1.0:
            raise ValueError("min_similarity_score must be between -1.0 and 1.0")
        return value

    @field_validator("chunk_size", "max_retrieved_chunks", "candidate_multiplier", "embedding_batch_size")
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @model_validator(mode="after")
    def check_chunk_overlap(self) -> "Settings":
        if self.chunk_overlap < 0:
            raise ValueError("chunk_overlap must be non-negative")
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be less than chunk_size")
        return self

    @property
    def documents_dir(self) -> Path:
        """Directory holding one content file per document."""
        return self.data_dir / "documents"

    @property
    def metadata_file(self) -> Path:
        """Aggregate metadata library file."""
        return self.data_dir / "library.json"

    @property
    def vector_db_path(self) -> Path:
        """SQLite database holding chunk vectors."""
        return self.data_dir / "vectors.db"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.documents_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
