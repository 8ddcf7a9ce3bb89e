"""Utility modules."""
from csv_preview_core.util.errors import ContractViolation, PreviewError
from csv_preview_core.util.ids import generate_session_id

__all__ = ["ContractViolation", "PreviewError", "generate_session_id"]
