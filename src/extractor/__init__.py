"""Full-text extraction of linked articles."""

from src.extractor.batch import extract_batch, is_discussion_url
from src.extractor.reader import JINA_READER_PREFIX, JinaReader, strip_reader_headers


__all__ = [
    "JINA_READER_PREFIX",
    "JinaReader",
    "extract_batch",
    "is_discussion_url",
    "strip_reader_headers",
]
