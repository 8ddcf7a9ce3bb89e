"""Error types."""


class PreviewError(Exception):
    """Base class for preview errors."""


class ContractViolation(PreviewError):
    """An action was invoked while its preconditions were unmet.

    Callers are expected to check the gating predicates first; reaching this
    is a programming error, not a user-facing failure.
    """
