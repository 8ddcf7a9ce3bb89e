"""Tokenizer configuration."""
import codecs
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

AUTO_DELIMITERS = ",\t;|"


class ParseConfig(BaseModel):
    """Options recognized by the tokenizers.

    An empty ``delimiter`` asks the tokenizer to detect it from the text.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    delimiter: str = Field(default="", max_length=1)
    quote_char: str = Field(default='"', min_length=1, max_length=1)
    escape_char: str | None = Field(default=None, min_length=1, max_length=1)
    comment: str | None = Field(default=None, min_length=1)
    skip_initial_space: bool = False
    encoding: str = "utf-8-sig"

    @field_validator("delimiter")
    @classmethod
    def _delimiter_not_newline(cls, v: str) -> str:
        if v in ("\r", "\n"):
            raise ValueError("delimiter cannot be a line break")
        return v

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v}") from e
        return v


def snapshot_config(config: ParseConfig | Mapping[str, Any] | None) -> ParseConfig:
    """Capture a configuration by value.

    Mappings are validated into a fresh model; models are deep-copied so the
    caller keeps no handle on the snapshot.
    """
    if config is None:
        return ParseConfig()
    if isinstance(config, ParseConfig):
        return config.model_copy(deep=True)
    return ParseConfig.model_validate(dict(config))
