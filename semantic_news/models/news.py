"""News record data models for the semantic-news pipeline.

``NewsRecord`` mirrors one line of the news corpus (a JSON object with
snake_case keys) and the persisted table schema: the string length limits
below are the column sizes used by every storage backend.  Records are
frozen; the only thing attached after ingestion is an embedding, carried by
the separate :class:`EmbeddedRecord` wrapper so that a record can own one
vector per embedding provider without those vectors ever being mixed.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

# Column sizes shared by the SQLite, ChromaDB and pgvector schemas.
LINK_MAX_LENGTH = 400
HEADLINE_MAX_LENGTH = 400
CATEGORY_MAX_LENGTH = 30
SHORT_DESCRIPTION_MAX_LENGTH = 4000
AUTHORS_MAX_LENGTH = 400


class NewsRecord(BaseModel):
    """A single news item as read from the corpus."""

    model_config = ConfigDict(frozen=True)

    # Assigned by the storage backend on insert; ``None`` until persisted.
    id: int | None = Field(default=None, description="Backend-assigned integer identifier.")
    link: str = Field(max_length=LINK_MAX_LENGTH, description="Source URL of the article.")
    headline: str = Field(max_length=HEADLINE_MAX_LENGTH, description="Article headline (the embedded text).")
    category: str = Field(max_length=CATEGORY_MAX_LENGTH, description="Category label, e.g. POLITICS.")
    short_description: str = Field(
        default="",
        max_length=SHORT_DESCRIPTION_MAX_LENGTH,
        description="Short description or teaser.",
    )
    authors: str = Field(default="", max_length=AUTHORS_MAX_LENGTH, description="Comma-separated authors.")
    date: datetime.date = Field(description="Publication date.")

    def with_id(self, record_id: int) -> NewsRecord:
        """Return a copy of this record carrying a backend-assigned id."""
        return self.model_copy(update={"id": record_id})


@dataclass(frozen=True)
class EmbeddedRecord:
    """A :class:`NewsRecord` paired with one embedding vector.

    ``provider`` names the embedding provider that produced ``vector``;
    vectors from different providers are never compared.
    """

    record: NewsRecord
    vector: tuple[float, ...]
    provider: str = ""

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass(frozen=True, order=False)
class SimilarityResult:
    """A ranked search hit: cosine similarity ``score`` in [-1, 1] and its record."""

    score: float
    record: NewsRecord

    @property
    def distance(self) -> float:
        """Cosine distance, ``1 - score``."""
        return 1.0 - self.score

    @classmethod
    def from_distance(cls, distance: float, record: NewsRecord) -> SimilarityResult:
        return cls(score=1.0 - float(distance), record=record)


@dataclass
class IngestionResult:
    """Summary of one ingestion run.

    ``records`` holds the embedded records that were written; it is empty
    when every target store already contained rows and the run was a no-op.
    """

    provider_name: str
    records: list[EmbeddedRecord] = field(default_factory=list)
    lines_read: int = 0
    records_retained: int = 0
    stores_written: list[str] = field(default_factory=list)
    stores_skipped: list[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0
