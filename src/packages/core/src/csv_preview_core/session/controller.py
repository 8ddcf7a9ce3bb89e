"""Preview session controller."""
import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog

from csv_preview_core.ingest.config import ParseConfig, snapshot_config
from csv_preview_core.ingest.infer import infer_has_headers
from csv_preview_core.ingest.models import PreviewFatal, PreviewSuccess, PreviewWarning, SessionState
from csv_preview_core.ingest.preview import INTERNAL_ERROR_MESSAGE, preview_parse
from csv_preview_core.ingest.source import FileSource
from csv_preview_core.util import ContractViolation, generate_session_id

logger = structlog.get_logger()

PreviewParser = Callable[..., Awaitable[PreviewFatal | PreviewWarning | PreviewSuccess]]
ChangeObserver = Callable[[PreviewSuccess | None], None]


class PreviewSession:
    """Previews the currently selected file.

    Each selection bumps a generation token and starts a parse in the
    background. A finished parse is published only if its generation is still
    the current one; otherwise it is dropped without any observable effect.
    ``teardown`` bumps the token without starting anything, so whatever is
    still in flight is dropped when it finishes.

    ``on_change`` receives the usable preview (or ``None``) after every state
    transition. Observer errors raised while a background parse publishes are
    logged, not re-raised. Extra keyword arguments are passed through to
    ``parser``.
    """

    def __init__(
        self,
        *,
        parser: PreviewParser = preview_parse,
        on_change: ChangeObserver | None = None,
        current_preview: PreviewSuccess | None = None,
        session_id: str | None = None,
        **parse_options: Any,
    ):
        self.session_id = session_id or generate_session_id()
        self.source: FileSource | None = None
        self._parser = parser
        self._on_change = on_change
        self._parse_options = parse_options
        self._state = SessionState(generation=0, result=current_preview)
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def generation(self) -> int:
        return self._state.generation

    @property
    def closed(self) -> bool:
        return self._closed

    def current_result(self) -> SessionState:
        """Latest published state."""
        return self._state

    def select_file(
        self,
        source: FileSource,
        config: ParseConfig | Mapping[str, Any] | None = None,
        assume_no_headers: bool = False,
    ) -> asyncio.Task:
        """Start previewing ``source``, superseding any earlier request.

        Must be called from a running event loop. The returned task resolves
        to the parse result, whether or not it ended up being published.
        """
        config = snapshot_config(config)
        assume_no_headers = bool(assume_no_headers)
        loop = asyncio.get_running_loop()

        generation = self._state.generation + 1
        self.source = source
        self._closed = False
        self._set_state(SessionState(generation=generation))
        logger.info(
            "preview_requested",
            session_id=self.session_id,
            generation=generation,
            file=source.name,
        )
        self._task = loop.create_task(self._run(generation, source, config, assume_no_headers))
        return self._task

    async def wait(self) -> SessionState:
        """Wait for the latest request to finish and return the state."""
        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)
        return self._state

    def toggle_has_headers(self) -> bool:
        """Flip the header flag of the settled preview and return the new value."""
        state = self._state
        if self._closed or not state.can_toggle_headers:
            raise ContractViolation("header toggle is not available for the current preview")
        preview = state.usable_preview
        toggled = preview.model_copy(update={"has_headers": not preview.has_headers})
        self._set_state(SessionState(generation=state.generation, result=toggled))
        return toggled.has_headers

    def can_accept(self) -> bool:
        return not self._closed and self._state.can_accept

    def accept(self) -> PreviewSuccess:
        """Hand the settled preview on to the next step."""
        if not self.can_accept():
            raise ContractViolation("unexpected missing preview info")
        preview = self._state.usable_preview
        logger.info(
            "preview_accepted",
            session_id=self.session_id,
            generation=self._state.generation,
            has_headers=preview.has_headers,
        )
        return preview

    def teardown(self) -> None:
        """Invalidate any in-flight request without starting a new one."""
        self._state = SessionState(generation=self._state.generation + 1, result=self._state.result)
        self._closed = True

    def cancel(self) -> None:
        """Abandon the preview; always allowed."""
        self.teardown()
        logger.info("preview_cancelled", session_id=self.session_id, generation=self._state.generation)

    async def _run(
        self,
        generation: int,
        source: FileSource,
        config: ParseConfig,
        assume_no_headers: bool,
    ) -> PreviewFatal | PreviewWarning | PreviewSuccess:
        try:
            result = await self._parser(source, config, **self._parse_options)
        except Exception:
            logger.exception("preview_parser_failed", session_id=self.session_id, generation=generation)
            result = PreviewFatal(message=INTERNAL_ERROR_MESSAGE)
        try:
            self._publish(generation, result, assume_no_headers)
        except Exception:
            # nobody may be awaiting this task; the state is already settled
            logger.exception("preview_observer_failed", session_id=self.session_id, generation=generation)
        return result

    def _publish(
        self,
        generation: int,
        result: PreviewFatal | PreviewWarning | PreviewSuccess,
        assume_no_headers: bool,
    ) -> bool:
        if generation != self._state.generation:
            logger.debug(
                "stale_preview_discarded",
                session_id=self.session_id,
                generation=generation,
                current_generation=self._state.generation,
            )
            return False
        if isinstance(result, PreviewSuccess):
            result = result.model_copy(
                update={"has_headers": infer_has_headers(result, assume_no_headers)}
            )
        self._set_state(SessionState(generation=generation, result=result))
        logger.info(
            "preview_settled",
            session_id=self.session_id,
            generation=generation,
            kind=result.kind,
        )
        return True

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state.usable_preview)
