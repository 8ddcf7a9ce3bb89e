"""CSV tokenizer."""
import csv
import io
from collections.abc import Iterable, Iterator

from csv_preview_core.ingest.config import AUTO_DELIMITERS, ParseConfig
from csv_preview_core.ingest.tokenizers.base import BaseTokenizer, ParseIssue, TokenizeResult

DEFAULT_DELIMITER = ","
SNIFF_SAMPLE_CHARS = 64 * 1024


def _without_comments(lines: Iterable[str], prefix: str | None) -> Iterator[str]:
    for line in lines:
        if prefix and line.startswith(prefix):
            continue
        yield line


def _field_count_issue(expected: int, row: list[str], index: int) -> ParseIssue | None:
    if len(row) < expected:
        return ParseIssue(
            code="TooFewFields",
            message=f"Too few fields: expected {expected} fields but parsed {len(row)}",
            row=index,
        )
    if len(row) > expected:
        return ParseIssue(
            code="TooManyFields",
            message=f"Too many fields: expected {expected} fields but parsed {len(row)}",
            row=index,
        )
    return None


class CSVTokenizer(BaseTokenizer):
    """Tokenizer for comma-separated (or sniffed) text."""

    name = "csv"
    default_delimiter = ""

    def detect(self, suffix: str) -> bool:
        return suffix == ".csv"

    def resolve_delimiter(self, text: str, config: ParseConfig) -> str:
        """Pick the delimiter: explicit config, tokenizer default, then sniffing."""
        if config.delimiter:
            return config.delimiter
        if self.default_delimiter:
            return self.default_delimiter
        sample = "".join(_without_comments(io.StringIO(text[:SNIFF_SAMPLE_CHARS], newline=""), config.comment))
        try:
            return csv.Sniffer().sniff(sample, delimiters=AUTO_DELIMITERS).delimiter
        except csv.Error:
            return DEFAULT_DELIMITER

    def parse(self, text: str, config: ParseConfig, max_rows: int) -> TokenizeResult:
        result = TokenizeResult()
        try:
            reader = csv.reader(
                _without_comments(io.StringIO(text, newline=""), config.comment),
                delimiter=self.resolve_delimiter(text, config),
                quotechar=config.quote_char,
                escapechar=config.escape_char,
                skipinitialspace=config.skip_initial_space,
                doublequote=config.escape_char is None,
            )
            for row in reader:
                if not row:
                    continue
                if result.rows and result.warning is None:
                    result.warning = _field_count_issue(len(result.rows[0]), row, len(result.rows))
                result.rows.append(row)
                if len(result.rows) >= max_rows:
                    break
        except csv.Error as e:
            result.error = str(e) or repr(e)
        return result
