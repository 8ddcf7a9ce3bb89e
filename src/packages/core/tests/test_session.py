"""Tests for the preview session controller."""
import asyncio

import pytest

from csv_preview_core.ingest import (
    BytesFileSource,
    PreviewFatal,
    PreviewSuccess,
    PreviewWarning,
)
from csv_preview_core.ingest.preview import INTERNAL_ERROR_MESSAGE
from csv_preview_core.session import PreviewSession
from csv_preview_core.util import ContractViolation


def _success(rows):
    return PreviewSuccess(first_chunk="", first_rows=rows, is_single_line=len(rows) == 1)


class GatedParser:
    """Parser whose calls block until the test releases them."""

    def __init__(self, results):
        self.results = results
        self.gates = {}
        self.configs = {}

    async def __call__(self, source, config, **kwargs):
        gate = asyncio.Event()
        self.gates[source.name] = gate
        self.configs[source.name] = config
        await gate.wait()
        return self.results[source.name]

    async def started(self, name):
        while name not in self.gates:
            await asyncio.sleep(0)

    def release(self, name):
        self.gates[name].set()


def _source(name, text=""):
    return BytesFileSource(name, text.encode())


def test_multi_row_file_infers_headers():
    async def scenario(assume_no_headers):
        session = PreviewSession()
        await session.select_file(_source("a.csv", "a,b,c\n1,2,3\n4,5,6"), assume_no_headers=assume_no_headers)
        return session

    session = asyncio.run(scenario(False))
    state = session.current_result()
    assert isinstance(state.result, PreviewSuccess)
    assert state.result.is_single_line is False
    assert state.result.has_headers is True
    assert state.result.first_rows == [["a", "b", "c"], ["1", "2", "3"], ["4", "5", "6"]]
    assert session.can_accept()

    session = asyncio.run(scenario(True))
    assert session.current_result().result.has_headers is False
    assert session.current_result().can_toggle_headers


@pytest.mark.parametrize("assume_no_headers", [False, True])
def test_single_line_file_cannot_toggle(assume_no_headers):
    async def scenario():
        session = PreviewSession()
        await session.select_file(_source("a.csv", "1,2,3"), assume_no_headers=assume_no_headers)
        return session

    session = asyncio.run(scenario())
    state = session.current_result()
    assert state.result.is_single_line is True
    assert state.result.has_headers is False
    assert state.can_toggle_headers is False
    with pytest.raises(ContractViolation):
        session.toggle_has_headers()
    assert session.current_result() is state
    assert session.can_accept()


def test_fatal_blocks_accept_and_is_replaced_by_reselect():
    async def scenario():
        parser = GatedParser({"bad.csv": PreviewFatal(message="broken"), "good.csv": _success([["1"], ["2"]])})
        session = PreviewSession(parser=parser)
        task = session.select_file(_source("bad.csv"))
        await parser.started("bad.csv")
        parser.release("bad.csv")
        await task

        assert session.current_result().result == PreviewFatal(message="broken")
        assert not session.can_accept()
        with pytest.raises(ContractViolation):
            session.accept()

        generation = session.generation
        session.select_file(_source("good.csv"))
        state = session.current_result()
        assert state.pending
        assert state.generation == generation + 1
        await parser.started("good.csv")
        parser.release("good.csv")
        await session.wait()
        assert session.can_accept()

    asyncio.run(scenario())


def test_warning_blocks_accept():
    async def scenario():
        session = PreviewSession()
        await session.select_file(_source("ragged.csv", "a,b\n1\n"))
        return session

    session = asyncio.run(scenario())
    assert isinstance(session.current_result().result, PreviewWarning)
    assert not session.can_accept()
    with pytest.raises(ContractViolation):
        session.accept()
    with pytest.raises(ContractViolation):
        session.toggle_has_headers()


def test_stale_result_finishing_late_is_dropped():
    seen = []

    async def scenario():
        first = _success([["old"], ["old"]])
        second = _success([["new"], ["new"]])
        parser = GatedParser({"f1.csv": first, "f2.csv": second})
        session = PreviewSession(parser=parser, on_change=seen.append)

        task_a = session.select_file(_source("f1.csv"))
        await parser.started("f1.csv")
        task_b = session.select_file(_source("f2.csv"))
        await parser.started("f2.csv")

        parser.release("f2.csv")
        await task_b
        settled = session.current_result()
        assert settled.result.first_rows == [["new"], ["new"]]

        parser.release("f1.csv")
        assert (await task_a).first_rows == [["old"], ["old"]]
        assert session.current_result() is settled

    asyncio.run(scenario())
    assert [p.first_rows if p else None for p in seen] == [None, None, [["new"], ["new"]]]


def test_stale_result_finishing_early_is_dropped():
    async def scenario():
        parser = GatedParser({"f1.csv": PreviewFatal(message="old"), "f2.csv": _success([["a"], ["b"]])})
        session = PreviewSession(parser=parser)

        task_a = session.select_file(_source("f1.csv"))
        await parser.started("f1.csv")
        session.select_file(_source("f2.csv"))
        await parser.started("f2.csv")

        parser.release("f1.csv")
        await task_a
        assert session.current_result().pending

        parser.release("f2.csv")
        state = await session.wait()
        assert state.result.first_rows == [["a"], ["b"]]

    asyncio.run(scenario())


def test_toggle_flips_only_has_headers():
    seen = []

    async def scenario():
        session = PreviewSession(on_change=seen.append)
        await session.select_file(_source("a.csv", "a,b\n1,2\n"))
        return session

    session = asyncio.run(scenario())
    before = session.current_result()
    assert session.toggle_has_headers() is False
    after = session.current_result()
    assert after.result.has_headers is False
    assert after.result.first_chunk == before.result.first_chunk
    assert after.result.first_rows == before.result.first_rows
    assert after.generation == before.generation
    assert before.result.has_headers is True

    assert session.toggle_has_headers() is True
    assert session.current_result().result == before.result
    assert [p.has_headers if p else None for p in seen] == [None, True, False, True]


def test_teardown_suppresses_in_flight_result():
    seen = []

    async def scenario():
        parser = GatedParser({"a.csv": _success([["a"], ["b"]])})
        session = PreviewSession(parser=parser, on_change=seen.append)
        task = session.select_file(_source("a.csv"))
        await parser.started("a.csv")
        session.teardown()
        state = session.current_result()
        calls = len(seen)

        parser.release("a.csv")
        await task
        assert session.current_result() is state
        assert len(seen) == calls
        assert not session.can_accept()

    asyncio.run(scenario())


def test_cancel_closes_settled_session():
    async def scenario():
        session = PreviewSession()
        await session.select_file(_source("a.csv", "a,b\n1,2\n"))
        return session

    session = asyncio.run(scenario())
    assert session.can_accept()
    session.cancel()
    assert session.closed
    assert not session.can_accept()
    with pytest.raises(ContractViolation):
        session.toggle_has_headers()


def test_config_is_captured_at_request_time():
    async def scenario():
        parser = GatedParser({"a.csv": _success([["a"], ["b"]])})
        session = PreviewSession(parser=parser)
        options = {"delimiter": ";"}
        session.select_file(_source("a.csv"), options)
        options["delimiter"] = ","
        await parser.started("a.csv")
        assert parser.configs["a.csv"].delimiter == ";"
        parser.release("a.csv")
        await session.wait()

    asyncio.run(scenario())


def test_parser_failure_becomes_fatal():
    async def broken(source, config, **kwargs):
        raise RuntimeError("boom")

    async def scenario():
        session = PreviewSession(parser=broken)
        await session.select_file(_source("a.csv"))
        return session

    session = asyncio.run(scenario())
    assert session.current_result().result == PreviewFatal(message=INTERNAL_ERROR_MESSAGE)


def test_observer_error_does_not_fail_background_parse():
    seen = []

    def observer(preview):
        seen.append(preview)
        if preview is not None:
            raise RuntimeError("observer broke")

    async def scenario():
        session = PreviewSession(on_change=observer)
        result = await session.select_file(_source("a.csv", "a,b\n1,2\n"))
        return session, result

    session, result = asyncio.run(scenario())
    assert isinstance(result, PreviewSuccess)
    assert session.current_result().result.has_headers is True
    assert session.can_accept()
    assert seen[0] is None
    assert seen[-1] is not None


def test_parse_options_are_forwarded():
    async def scenario():
        session = PreviewSession(row_count=2)
        await session.select_file(_source("a.csv", "a\nb\nc\nd\n"))
        return session

    session = asyncio.run(scenario())
    assert session.current_result().result.first_rows == [["a"], ["b"]]


def test_restored_preview_is_accepted_without_parsing():
    preview = _success([["a"], ["1"]]).model_copy(update={"has_headers": True})
    session = PreviewSession(current_preview=preview)
    assert session.current_result().generation == 0
    assert session.accept() is preview


def test_select_file_requires_running_loop():
    session = PreviewSession()
    with pytest.raises(RuntimeError):
        session.select_file(_source("a.csv", "a\n"))
    assert session.current_result().generation == 0
