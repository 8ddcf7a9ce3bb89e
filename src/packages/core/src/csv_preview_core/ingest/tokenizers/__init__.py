"""Delimited-text tokenizers."""
from csv_preview_core.ingest.tokenizers.base import BaseTokenizer, ParseIssue, TokenizeResult
from csv_preview_core.ingest.tokenizers.csv import CSVTokenizer
from csv_preview_core.ingest.tokenizers.tsv import TSVTokenizer

TOKENIZERS = [TSVTokenizer(), CSVTokenizer()]


def get_tokenizer(name: str) -> BaseTokenizer:
    """Get a tokenizer by name."""
    for tokenizer in TOKENIZERS:
        if tokenizer.name == name:
            return tokenizer
    raise ValueError(f"Unknown tokenizer: {name}")


def detect_tokenizer(suffix: str) -> BaseTokenizer:
    """Pick a tokenizer from a file suffix, defaulting to CSV."""
    suffix = suffix.lower()
    for tokenizer in TOKENIZERS:
        if tokenizer.detect(suffix):
            return tokenizer
    return get_tokenizer("csv")


__all__ = [
    "BaseTokenizer",
    "CSVTokenizer",
    "ParseIssue",
    "TSVTokenizer",
    "TokenizeResult",
    "TOKENIZERS",
    "detect_tokenizer",
    "get_tokenizer",
]
