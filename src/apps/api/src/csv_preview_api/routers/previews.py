"""Preview session endpoints."""
import os
import time
from pathlib import Path

import structlog
from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from csv_preview_api.settings import get_settings
from csv_preview_core.ingest import LocalFileSource, ParseConfig, PreviewSuccess, accepted_sample
from csv_preview_core.session import PreviewSession
from csv_preview_core.util import ContractViolation, generate_session_id

router = APIRouter(prefix="/previews", tags=["previews"])
logger = structlog.get_logger()

SESSIONS: dict[str, PreviewSession] = {}
UPLOAD_PATHS: dict[str, list[str]] = {}
# last usable preview reported by each session; what the wizard carries forward
USABLE_PREVIEWS: dict[str, PreviewSuccess | None] = {}
LAST_SEEN: dict[str, float] = {}


def _parse_config(
    delimiter: str,
    quote_char: str,
    escape_char: str | None,
    comment: str | None,
    skip_initial_space: bool,
    encoding: str,
) -> ParseConfig:
    try:
        return ParseConfig(
            delimiter=delimiter,
            quote_char=quote_char,
            escape_char=escape_char or None,
            comment=comment or None,
            skip_initial_space=skip_initial_space,
            encoding=encoding,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


async def _save_upload(session_id: str, file: UploadFile) -> LocalFileSource:
    settings = get_settings()
    max_bytes = settings.max_upload_mb * 1024 * 1024
    content = await file.read()
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413, detail=f"File too large (max {settings.max_upload_mb} MB)"
        )

    name = file.filename or "upload"
    suffix = Path(name).suffix.lower()
    os.makedirs(settings.upload_dir, exist_ok=True)
    index = len(UPLOAD_PATHS.get(session_id, []))
    save_path = os.path.join(settings.upload_dir, f"{session_id}-{index}{suffix}")
    with open(save_path, "wb") as f:
        f.write(content)
    UPLOAD_PATHS.setdefault(session_id, []).append(save_path)
    return LocalFileSource(save_path, name=name)


def _remove_uploads(session_id: str) -> None:
    for path in UPLOAD_PATHS.pop(session_id, []):
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


def _discard(session_id: str) -> None:
    """Forget a session and delete its uploads."""
    session = SESSIONS.pop(session_id, None)
    if session is not None and not session.closed:
        session.teardown()
    USABLE_PREVIEWS.pop(session_id, None)
    LAST_SEEN.pop(session_id, None)
    _remove_uploads(session_id)


def _evict_expired() -> None:
    ttl = get_settings().session_ttl_seconds
    now = time.monotonic()
    for session_id, seen in list(LAST_SEEN.items()):
        if now - seen >= ttl:
            _discard(session_id)
            logger.info("preview_session_expired", session_id=session_id)


def _new_session(session_id: str, current_preview: PreviewSuccess | None = None) -> PreviewSession:
    def remember(preview: PreviewSuccess | None) -> None:
        USABLE_PREVIEWS[session_id] = preview

    session = PreviewSession(
        session_id=session_id,
        on_change=remember,
        current_preview=current_preview,
        **get_settings().preview_options(),
    )
    SESSIONS[session_id] = session
    LAST_SEEN[session_id] = time.monotonic()
    return session


def _get_session(session_id: str) -> PreviewSession:
    session = SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Preview session not found")
    LAST_SEEN[session_id] = time.monotonic()
    return session


def _session_payload(session: PreviewSession) -> dict:
    state = session.current_result()
    return {
        "session_id": session.session_id,
        "file_name": session.source.name if session.source else None,
        "generation": state.generation,
        "pending": state.pending,
        "closed": session.closed,
        "result": state.result.model_dump() if state.result is not None else None,
        "can_accept": session.can_accept(),
        "can_toggle_headers": not session.closed and state.can_toggle_headers,
    }


@router.post("")
async def create_preview(
    file: UploadFile = File(...),
    delimiter: str = Form(""),
    quote_char: str = Form('"'),
    escape_char: str | None = Form(None),
    comment: str | None = Form(None),
    skip_initial_space: bool = Form(False),
    encoding: str = Form("utf-8-sig"),
    assume_no_headers: bool = Form(False),
    wait: bool = False,
):
    """Upload a file and start previewing it."""
    _evict_expired()
    config = _parse_config(delimiter, quote_char, escape_char, comment, skip_initial_space, encoding)
    session_id = generate_session_id()
    source = await _save_upload(session_id, file)
    session = _new_session(session_id)
    session.select_file(source, config, assume_no_headers)
    if wait:
        await session.wait()
    return _session_payload(session)


@router.put("/{session_id}/file")
async def reselect_file(
    session_id: str,
    file: UploadFile = File(...),
    delimiter: str = Form(""),
    quote_char: str = Form('"'),
    escape_char: str | None = Form(None),
    comment: str | None = Form(None),
    skip_initial_space: bool = Form(False),
    encoding: str = Form("utf-8-sig"),
    assume_no_headers: bool = Form(False),
    wait: bool = False,
):
    """Preview a different file in an existing session; any earlier parse is superseded."""
    session = _get_session(session_id)
    config = _parse_config(delimiter, quote_char, escape_char, comment, skip_initial_space, encoding)
    source = await _save_upload(session_id, file)
    session.select_file(source, config, assume_no_headers)
    if wait:
        await session.wait()
    return _session_payload(session)


@router.get("/{session_id}")
def get_preview(session_id: str):
    """Get the current preview state."""
    return _session_payload(_get_session(session_id))


@router.post("/{session_id}/toggle-headers")
def toggle_headers(session_id: str):
    """Flip whether the first row is treated as a header row."""
    session = _get_session(session_id)
    try:
        session.toggle_has_headers()
    except ContractViolation as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return _session_payload(session)


@router.post("/{session_id}/accept")
def accept_preview(session_id: str):
    """Accept the preview and return what the column-mapping step needs.

    The preview step is closed afterwards. The upload stays on disk for the
    import step until the session is deleted or expires.
    """
    session = _get_session(session_id)
    if not session.can_accept():
        state = session.current_result()
        if session.closed:
            status = "closed"
        else:
            status = "pending" if state.pending else state.result.kind
        raise HTTPException(
            status_code=409, detail=f"Preview cannot be accepted (status: {status})"
        )
    preview = session.accept()
    session.teardown()
    return {"session_id": session_id, **accepted_sample(preview)}


@router.post("/{session_id}/reopen")
def reopen_preview(session_id: str):
    """Return to the preview step with the last usable preview restored."""
    session = _get_session(session_id)
    preview = USABLE_PREVIEWS.get(session_id)
    if preview is None:
        raise HTTPException(status_code=409, detail="No usable preview to restore")
    if not session.closed:
        session.teardown()
    reopened = _new_session(session_id, current_preview=preview)
    reopened.source = session.source
    logger.info("preview_reopened", session_id=session_id)
    return _session_payload(reopened)


@router.delete("/{session_id}")
def cancel_preview(session_id: str):
    """Cancel a preview session and discard its uploads."""
    session = _get_session(session_id)
    session.cancel()
    _discard(session_id)
    return {"session_id": session_id, "status": "cancelled"}


def close_all_sessions() -> None:
    """Tear down every open session and remove its uploads."""
    for session_id in list(SESSIONS):
        _discard(session_id)
    logger.info("preview_sessions_closed")
