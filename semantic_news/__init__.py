"""semantic-news: embed a news corpus and compare cosine similarity search
across in-memory, SQLite, ChromaDB and PostgreSQL/pgvector stores."""

__version__ = "0.1.0"
