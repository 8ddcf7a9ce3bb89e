"""Preview result and session state models."""
from dataclasses import dataclass
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from csv_preview_core.ingest.config import ParseConfig
from csv_preview_core.ingest.tokenizers import ParseIssue


class PreviewFatal(BaseModel):
    """The prefix could not be tokenized at all."""

    kind: Literal["fatal"] = "fatal"
    message: str


class PreviewWarning(BaseModel):
    """Tokenized, but the shape looks malformed; shown for diagnosis only."""

    kind: Literal["warning"] = "warning"
    warning: ParseIssue
    first_chunk: str
    first_rows: list[list[str]]
    is_single_line: bool


class PreviewSuccess(BaseModel):
    """A clean preview that can be accepted."""

    kind: Literal["success"] = "success"
    first_chunk: str
    first_rows: list[list[str]]
    is_single_line: bool
    has_headers: bool = False
    config: ParseConfig = Field(default_factory=ParseConfig)


PreviewResult = Annotated[
    Union[PreviewFatal, PreviewWarning, PreviewSuccess],
    Field(discriminator="kind"),
]


@dataclass(frozen=True)
class SessionState:
    """Generation token plus the settled result for it (``None`` while pending)."""

    generation: int
    result: PreviewFatal | PreviewWarning | PreviewSuccess | None = None

    @property
    def pending(self) -> bool:
        return self.result is None

    @property
    def usable_preview(self) -> PreviewSuccess | None:
        """The result forwarded to observers: a success, or nothing."""
        if isinstance(self.result, PreviewSuccess):
            return self.result
        return None

    @property
    def can_accept(self) -> bool:
        return self.usable_preview is not None

    @property
    def can_toggle_headers(self) -> bool:
        preview = self.usable_preview
        return preview is not None and not preview.is_single_line
