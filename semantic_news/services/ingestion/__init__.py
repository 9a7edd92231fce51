"""Corpus ingestion pipeline: **read -> filter -> embed -> store**.

1. **Read** (corpus_reader.py / CorpusReader) -- parses JSON lines into
   NewsRecord objects and keeps only the allowed categories.

2. **Embed** (via IEmbeddingProvider) -- one vector per record, requested
   per record or per fixed-size chunk depending on the provider.

3. **Store** (via IVectorStoreProvider) -- written to every configured
   store for that provider that does not already hold rows.
"""

from semantic_news.services.ingestion.corpus_reader import CorpusReader, parse_record
from semantic_news.services.ingestion.ingestion_service import IngestionService

__all__ = [
    "CorpusReader",
    "IngestionService",
    "parse_record",
]
