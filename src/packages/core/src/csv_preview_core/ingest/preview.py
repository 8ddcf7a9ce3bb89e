"""Bounded-prefix preview parsing and classification."""
import asyncio
import codecs
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any, BinaryIO

import structlog

from csv_preview_core.ingest.config import ParseConfig, snapshot_config
from csv_preview_core.ingest.models import PreviewFatal, PreviewSuccess, PreviewWarning
from csv_preview_core.ingest.source import FileSource
from csv_preview_core.ingest.tokenizers import BaseTokenizer, TokenizeResult, detect_tokenizer

logger = structlog.get_logger()

PREVIEW_ROW_COUNT = 5
CHUNK_SIZE = 10000
MAX_PREFIX_BYTES = 1024 * 1024

EMPTY_FILE_MESSAGE = "File is empty"
INTERNAL_ERROR_MESSAGE = "Internal error while generating preview"


def describe_error(error: BaseException) -> str:
    """Message text of an error, or its repr when it has none."""
    return str(error) or repr(error)


def _complete_lines(text: str) -> str:
    """Text up to and including the last line break."""
    cut = max(text.rfind("\n"), text.rfind("\r"))
    return text[: cut + 1]


def read_prefix(
    stream: BinaryIO,
    config: ParseConfig,
    tokenizer: BaseTokenizer,
    row_count: int = PREVIEW_ROW_COUNT,
    chunk_size: int = CHUNK_SIZE,
    max_prefix_bytes: int = MAX_PREFIX_BYTES,
) -> tuple[str, TokenizeResult]:
    """Read just enough of ``stream`` to tokenize ``row_count`` rows.

    Chunks are decoded incrementally and only complete lines are tokenized
    until the stream or the byte cap is exhausted. A line break can sit inside
    a quoted field, so until then the last row is not trusted: reading stops
    only once a row beyond ``row_count`` has started, and that extra row is
    dropped. Returns the prefix text that was tokenized along with the
    tokenizer's result.
    """
    decoder = codecs.getincrementaldecoder(config.encoding)()
    text = ""
    consumed = 0
    while True:
        data = stream.read(min(chunk_size, max_prefix_bytes - consumed))
        consumed += len(data)
        # a capped read may end inside a multi-byte character; leave it buffered
        text += decoder.decode(data, final=not data)
        exhausted = not data or consumed >= max_prefix_bytes
        if exhausted:
            return text, tokenizer.parse(text, config, row_count)

        prefix = _complete_lines(text)
        result = tokenizer.parse(prefix, config, row_count + 1)
        if result.error is not None:
            return prefix, result
        if len(result.rows) > row_count:
            del result.rows[row_count:]
            if result.warning is not None and (result.warning.row or 0) >= row_count:
                result.warning = None
            return prefix, result


def classify_preview(
    prefix: str, result: TokenizeResult, config: ParseConfig
) -> PreviewFatal | PreviewWarning | PreviewSuccess:
    """Turn a tokenizer result into a preview result.

    Errors win over warnings, warnings over success. ``has_headers`` is left
    unset; the session infers it.
    """
    if result.error is not None:
        return PreviewFatal(message=result.error)
    if not result.rows:
        return PreviewFatal(message=EMPTY_FILE_MESSAGE)

    is_single_line = len(result.rows) == 1
    if result.warning is not None:
        return PreviewWarning(
            warning=result.warning,
            first_chunk=prefix,
            first_rows=result.rows,
            is_single_line=is_single_line,
        )
    return PreviewSuccess(
        first_chunk=prefix,
        first_rows=result.rows,
        is_single_line=is_single_line,
        config=config,
    )


def parse_preview_sync(
    source: FileSource,
    config: ParseConfig,
    tokenizer: BaseTokenizer,
    row_count: int = PREVIEW_ROW_COUNT,
    chunk_size: int = CHUNK_SIZE,
    max_prefix_bytes: int = MAX_PREFIX_BYTES,
) -> PreviewFatal | PreviewWarning | PreviewSuccess:
    """Blocking preview of one file."""
    try:
        with source.open() as stream:
            prefix, result = read_prefix(
                stream,
                config,
                tokenizer,
                row_count=row_count,
                chunk_size=chunk_size,
                max_prefix_bytes=max_prefix_bytes,
            )
    except (OSError, UnicodeDecodeError) as e:
        return PreviewFatal(message=describe_error(e))
    return classify_preview(prefix, result, config)


async def preview_parse(
    source: FileSource,
    config: ParseConfig | Mapping[str, Any] | None = None,
    *,
    tokenizer: BaseTokenizer | None = None,
    row_count: int = PREVIEW_ROW_COUNT,
    chunk_size: int = CHUNK_SIZE,
    max_prefix_bytes: int = MAX_PREFIX_BYTES,
) -> PreviewFatal | PreviewWarning | PreviewSuccess:
    """Preview a file without blocking the event loop.

    The read and tokenize run in a worker thread. Unexpected failures are
    logged and reported as a fatal preview rather than raised.
    """
    config = snapshot_config(config)
    if tokenizer is None:
        tokenizer = detect_tokenizer(PurePath(source.name).suffix)
    try:
        result = await asyncio.to_thread(
            parse_preview_sync,
            source,
            config,
            tokenizer,
            row_count=row_count,
            chunk_size=chunk_size,
            max_prefix_bytes=max_prefix_bytes,
        )
    except Exception:
        logger.exception("preview_parse_failed", file=source.name, tokenizer=tokenizer.name)
        return PreviewFatal(message=INTERNAL_ERROR_MESSAGE)
    logger.info("preview_parsed", file=source.name, kind=result.kind)
    return result
