"""Preview session lifecycle."""
from csv_preview_core.session.controller import PreviewSession

__all__ = ["PreviewSession"]
