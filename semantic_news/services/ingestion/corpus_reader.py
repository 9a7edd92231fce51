"""JSON-lines corpus reader.

Each non-blank line of the corpus is one JSON object with snake_case keys
(``link, headline, category, short_description, authors, date``).  The
reader parses lines lazily, stops at the first malformed line with a
:class:`CorpusParseError` carrying its 1-based line number, and keeps only
records whose category is in the allowed set, compared case-insensitively.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator

import structlog
from pydantic import ValidationError

from semantic_news.models.news import NewsRecord
from semantic_news.utils.errors import CorpusParseError

logger = structlog.get_logger(logger_name=__name__)


def parse_record(line: str, line_number: int) -> NewsRecord:
    """Parse one corpus line into a :class:`NewsRecord`."""
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise CorpusParseError(
            message=f"Invalid JSON: {exc.msg}",
            line_number=line_number,
        ) from exc

    if not isinstance(data, dict):
        raise CorpusParseError(
            message=f"Expected a JSON object, got {type(data).__name__}",
            line_number=line_number,
        )
    # Corpus ids are never trusted; the storage backend assigns them.
    data.pop("id", None)

    try:
        return NewsRecord.model_validate(data)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        raise CorpusParseError(
            message=f"Invalid record ({fields}): {exc.error_count()} validation error(s)",
            line_number=line_number,
        ) from exc


class CorpusReader:
    """Stream :class:`NewsRecord` objects out of corpus lines.

    The counters are updated as the iterator is consumed.
    """

    def __init__(self, allowed_categories: Iterable[str]) -> None:
        self._allowed = frozenset(category.strip().casefold() for category in allowed_categories)
        self.lines_read = 0
        self.records_retained = 0

    def is_allowed(self, category: str) -> bool:
        return category.strip().casefold() in self._allowed

    def read(self, lines: Iterable[str]) -> Iterator[NewsRecord]:
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            self.lines_read += 1
            record = parse_record(line, line_number)
            if not self.is_allowed(record.category):
                continue
            self.records_retained += 1
            yield record

        logger.debug(
            "corpus_read_complete",
            lines_read=self.lines_read,
            records_retained=self.records_retained,
        )
