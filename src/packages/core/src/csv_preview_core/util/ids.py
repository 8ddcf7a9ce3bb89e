"""ID generation utilities."""
import uuid


def generate_session_id() -> str:
    """Generate an opaque preview session ID."""
    return uuid.uuid4().hex
