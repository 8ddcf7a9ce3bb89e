"""TSV tokenizer."""
from csv_preview_core.ingest.tokenizers.csv import CSVTokenizer


class TSVTokenizer(CSVTokenizer):
    """Tokenizer for tab-separated text; an explicit delimiter still wins."""

    name = "tsv"
    default_delimiter = "\t"

    def detect(self, suffix: str) -> bool:
        return suffix in (".tsv", ".tab")
