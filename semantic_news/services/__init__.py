"""Business logic: ingestion, exact similarity search, the comparison harness
and text output formatting."""
