"""Base tokenizer interface."""
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from csv_preview_core.ingest.config import ParseConfig


class ParseIssue(BaseModel):
    """A recoverable problem reported by a tokenizer."""

    code: str
    message: str
    row: int | None = None


class TokenizeResult(BaseModel):
    """Rows produced from a piece of text, plus at most one error or warning."""

    rows: list[list[str]] = Field(default_factory=list)
    error: str | None = None
    warning: ParseIssue | None = None


class BaseTokenizer(ABC):
    """Abstract base class for delimited-text tokenizers."""

    name: str = ""

    @abstractmethod
    def detect(self, suffix: str) -> bool:
        """Detect if this tokenizer is the natural choice for a file suffix."""
        pass

    @abstractmethod
    def parse(self, text: str, config: ParseConfig, max_rows: int) -> TokenizeResult:
        """Tokenize at most ``max_rows`` non-empty rows from ``text``."""
        pass
