"""Application settings loaded from environment variables via pydantic-settings.

# --- HOW SETTINGS WORK ------------------------------------------------
#
# pydantic-settings reads configuration from (highest priority first):
#
#   1. Environment variables -- e.g. OPENAI_API_KEY=sk-abc123
#   2. .env file             -- key=value lines in the project root
#   3. Field defaults below
#
# Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.  List and
# nested fields (``allowed_categories``, ``storage_backends``) are read from
# the environment as JSON, e.g.
#
#   STORAGE_BACKENDS='[{"name": "pg", "kind": "pgvector", ...}]'
#
# A Settings instance is built once at startup (see config/loader.py) and
# passed explicitly to the factories in semantic_news/main.py.  Nothing in
# the package reads configuration from a module-level global.
# ----------------------------------------------------------------------
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EmbeddingKind = Literal["local", "openai"]
BackendKind = Literal["memory", "sqlite", "chromadb", "pgvector"]


class StorageBackendConfig(BaseModel):
    """One configured vector store.

    ``target`` is interpreted per ``kind``: a database file for ``sqlite``,
    a persist directory for ``chromadb``, a SQLAlchemy URL for
    ``pgvector`` and ignored for ``memory``.  ``embedding`` names the
    provider variant whose vectors this store holds; ``dimension`` must
    match that provider's output.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    kind: BackendKind
    target: str = ""
    dimension: int = Field(gt=0)
    embedding: EmbeddingKind = "local"
    # Table (pgvector / sqlite) or collection (chromadb) name; defaults per kind.
    table: str = ""


def _default_backends() -> list[StorageBackendConfig]:
    return [
        StorageBackendConfig(
            name="sqlite-local", kind="sqlite", target="data/news.db",
            dimension=384, embedding="local",
        ),
        StorageBackendConfig(
            name="chromadb-local", kind="chromadb", target="data/chromadb",
            dimension=384, embedding="local", table="news_items_local",
        ),
        StorageBackendConfig(
            name="chromadb-openai", kind="chromadb", target="data/chromadb",
            dimension=1536, embedding="openai", table="news_items_openai",
        ),
    ]


class Settings(BaseSettings):
    """semantic-news application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Embedding providers ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (Azure proxy, TogetherAI, ...)
    openai_embedding_model: str = "text-embedding-3-small"
    openai_batch_size: int = Field(default=100, gt=0)
    local_embedding_backend: Literal["sentence_transformers", "fastembed"] = "sentence_transformers"
    local_embedding_model: str = ""  # Empty = the backend's 384-dim default

    # === Corpus ===
    corpus_path: str = "data/News.json"
    allowed_categories: list[str] = Field(
        default_factory=lambda: ["POLITICS", "SCIENCE", "TECH", "WORLD NEWS", "TRAVEL"]
    )

    # === Storage ===
    storage_backends: list[StorageBackendConfig] = Field(default_factory=_default_backends)
    # Backend the in-memory working set is loaded from at session start.
    snapshot_backend: str = "sqlite-local"
    write_batch_size: int = Field(default=500, gt=0)

    # === Search / ingestion ===
    search_top_k: int = Field(default=10, gt=0)
    progress_interval: int = Field(default=10000, gt=0)

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("allowed_categories")
    @classmethod
    def _strip_categories(cls, value: list[str]) -> list[str]:
        return [category.strip() for category in value if category.strip()]

    @model_validator(mode="after")
    def _check_backends(self) -> Settings:
        names = [backend.name for backend in self.storage_backends]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate storage backend names: {', '.join(duplicates)}")
        if self.snapshot_backend and self.snapshot_backend not in names:
            raise ValueError(
                f"snapshot_backend '{self.snapshot_backend}' is not a configured storage backend"
            )
        return self

    def backends_for(self, embedding: EmbeddingKind) -> list[StorageBackendConfig]:
        """Return the configured backends that hold vectors from *embedding*."""
        return [backend for backend in self.storage_backends if backend.embedding == embedding]

    def get_backend(self, name: str) -> StorageBackendConfig:
        for backend in self.storage_backends:
            if backend.name == name:
                return backend
        raise KeyError(name)
