import asyncio
import threading
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from conftest import make_analysis
from scriptoria.errors import GENERIC_ERROR_MESSAGE, AnalysisError
from scriptoria.models.analysis import ManuscriptAnalysis
from scriptoria.models.manuscript import ManuscriptStatus
from scriptoria.models.upload import UploadedFile
from scriptoria import pipeline as pipeline_module
from scriptoria.pipeline import ProcessingPipeline, describe_failure
from scriptoria.store import ManuscriptStore


class GatedAnalyzer:
    """Analysis stub whose calls finish only when the test releases them."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.gates: Dict[int, asyncio.Future] = {}

    async def analyze(self, encoded: str, mime_type: str) -> ManuscriptAnalysis:
        index = len(self.calls)
        self.calls.append((encoded, mime_type))
        self.gates[index] = asyncio.get_running_loop().create_future()
        return await self.gates[index]

    async def wait_for_calls(self, count: int) -> None:
        while len(self.calls) < count:
            await asyncio.sleep(0)



class HeldRead:
    """Holds the file read of one upload until the test releases it."""

    def __init__(self, monkeypatch: pytest.MonkeyPatch, name: str) -> None:
        self.name = name
        self.reading = threading.Event()
        self.release = threading.Event()
        encode = pipeline_module.encode_upload

        def held_encode(upload: UploadedFile, default_mime_type: str):
            if upload.name == self.name:
                self.reading.set()
                assert self.release.wait(timeout=5)
            return encode(upload, default_mime_type)

        monkeypatch.setattr(pipeline_module, "encode_upload", held_encode)

    async def wait_until_reading(self) -> None:
        while not self.reading.is_set():
            await asyncio.sleep(0.01)


def _upload(data: bytes, name: str = "leaf.png") -> UploadedFile:
    return UploadedFile(name=name, content_type="image/png", data=data)


def _pipeline(analyze) -> Tuple[ProcessingPipeline, ManuscriptStore]:
    store = ManuscriptStore()
    return ProcessingPipeline(store, analyze), store


class TestSubmit:
    def test_successful_analysis_completes_and_enters_history(
        self, png_bytes: bytes
    ) -> None:
        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            return make_analysis(0.92)

        pipeline, store = _pipeline(analyze)
        record = asyncio.run(pipeline.submit(_upload(png_bytes)))

        assert record.status is ManuscriptStatus.COMPLETED
        assert record.result.confidence_score == 0.92
        assert record.error is None
        assert store.current == record
        assert len(store.history) == 1
        assert store.history[0] == record

    def test_analyze_receives_payload_and_type(self, png_bytes: bytes) -> None:
        received = []

        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            received.append((encoded, mime_type))
            return make_analysis()

        pipeline, _ = _pipeline(analyze)
        record = asyncio.run(pipeline.submit(_upload(png_bytes)))
        assert received == [(record.encoded, "image/png")]

    def test_record_is_processing_while_call_is_pending(self, png_bytes: bytes) -> None:
        analyzer = GatedAnalyzer()
        pipeline, store = _pipeline(analyzer.analyze)

        async def scenario() -> None:
            task = asyncio.create_task(pipeline.submit(_upload(png_bytes)))
            await analyzer.wait_for_calls(1)
            assert store.current.status is ManuscriptStatus.PROCESSING
            assert store.current.result is None and store.current.error is None
            analyzer.gates[0].set_result(make_analysis())
            await task

        asyncio.run(scenario())
        assert store.current.status is ManuscriptStatus.COMPLETED

    def test_failure_sets_error_with_message(self, png_bytes: bytes) -> None:
        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            raise AnalysisError("quota exhausted")

        pipeline, store = _pipeline(analyze)
        record = asyncio.run(pipeline.submit(_upload(png_bytes)))

        assert record.status is ManuscriptStatus.ERROR
        assert record.error == "quota exhausted"
        assert record.result is None
        assert store.current == record
        assert store.history == []

    def test_failure_without_message_uses_generic_text(self, png_bytes: bytes) -> None:
        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            raise RuntimeError()

        pipeline, _ = _pipeline(analyze)
        record = asyncio.run(pipeline.submit(_upload(png_bytes)))
        assert record.error == GENERIC_ERROR_MESSAGE

    def test_custom_generic_message(self, png_bytes: bytes) -> None:
        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            raise ValueError("   ")

        store = ManuscriptStore()
        pipeline = ProcessingPipeline(store, analyze, generic_error_message="Try again")
        record = asyncio.run(pipeline.submit(_upload(png_bytes)))
        assert record.error == "Try again"

    def test_unreadable_file_sets_error(self, tmp_path: Path) -> None:
        calls = []

        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            calls.append(1)
            return make_analysis()

        pipeline, store = _pipeline(analyze)
        upload = UploadedFile.from_path(tmp_path / "missing.png", "image/png")
        record = asyncio.run(pipeline.submit(upload))

        assert record.status is ManuscriptStatus.ERROR
        assert record.error
        assert "missing.png" in record.error
        assert not record.has_payload
        assert record.mime_type == "image/png"
        assert store.current == record
        assert store.history == []
        assert calls == []

    def test_unexpected_analysis_value_sets_error(self, png_bytes: bytes) -> None:
        async def analyze(encoded: str, mime_type: str):
            return {"confidence_score": 0.92}

        pipeline, store = _pipeline(analyze)
        record = asyncio.run(pipeline.submit(_upload(png_bytes)))

        assert record.status is ManuscriptStatus.ERROR
        assert record.error
        assert record.result is None
        assert store.current == record
        assert store.history == []

    def test_exactly_one_of_result_or_error(self, png_bytes: bytes) -> None:
        outcomes = [make_analysis(), AnalysisError("x"), RuntimeError()]

        for outcome in outcomes:

            async def analyze(encoded: str, mime_type: str, outcome=outcome):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome

            pipeline, _ = _pipeline(analyze)
            record = asyncio.run(pipeline.submit(_upload(png_bytes)))
            assert record.status is not ManuscriptStatus.PROCESSING
            assert (record.result is None) != (record.error is None)


class TestInterleaving:
    def test_late_result_does_not_overwrite_newer_record(self, png_bytes: bytes) -> None:
        analyzer = GatedAnalyzer()
        pipeline, store = _pipeline(analyzer.analyze)

        async def scenario():
            task_a = asyncio.create_task(pipeline.submit(_upload(png_bytes, "a.png")))
            await analyzer.wait_for_calls(1)
            task_b = asyncio.create_task(pipeline.submit(_upload(png_bytes, "b.png")))
            await analyzer.wait_for_calls(2)

            analyzer.gates[0].set_result(make_analysis(0.5))
            record_a = await task_a
            assert store.current.name == "b.png"
            assert store.current.status is ManuscriptStatus.PROCESSING
            assert store.current.result is None

            analyzer.gates[1].set_result(make_analysis(0.92))
            record_b = await task_b
            return record_a, record_b

        record_a, record_b = asyncio.run(scenario())
        assert store.current == record_b
        assert store.current.result.confidence_score == 0.92
        assert [r.name for r in store.history] == ["b.png", "a.png"]
        assert record_a.status is ManuscriptStatus.COMPLETED

    def test_late_failure_does_not_overwrite_newer_record(self, png_bytes: bytes) -> None:
        analyzer = GatedAnalyzer()
        pipeline, store = _pipeline(analyzer.analyze)

        async def scenario():
            task_a = asyncio.create_task(pipeline.submit(_upload(png_bytes, "a.png")))
            await analyzer.wait_for_calls(1)
            task_b = asyncio.create_task(pipeline.submit(_upload(png_bytes, "b.png")))
            await analyzer.wait_for_calls(2)
            analyzer.gates[1].set_result(make_analysis())
            await task_b
            analyzer.gates[0].set_exception(AnalysisError("timed out"))
            await task_a

        asyncio.run(scenario())
        assert store.current.name == "b.png"
        assert store.current.status is ManuscriptStatus.COMPLETED


class TestReadInProgress:
    def test_record_is_current_before_the_read_finishes(
        self, png_bytes: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        held = HeldRead(monkeypatch, "a.png")

        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            return make_analysis()

        pipeline, store = _pipeline(analyze)

        async def scenario():
            task = asyncio.create_task(pipeline.submit(_upload(png_bytes, "a.png")))
            await held.wait_until_reading()
            assert store.current.name == "a.png"
            assert store.current.status is ManuscriptStatus.PROCESSING
            assert not store.current.has_payload
            held.release.set()
            return await task

        record = asyncio.run(scenario())
        assert record.status is ManuscriptStatus.COMPLETED
        assert record.has_payload
        assert store.current == record

    def test_reset_during_read_is_not_overridden(
        self, png_bytes: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        held = HeldRead(monkeypatch, "a.png")

        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            return make_analysis()

        pipeline, store = _pipeline(analyze)

        async def scenario():
            task = asyncio.create_task(pipeline.submit(_upload(png_bytes, "a.png")))
            await held.wait_until_reading()
            pipeline.reset()
            assert store.current is None
            held.release.set()
            return await task

        record = asyncio.run(scenario())
        assert record.status is ManuscriptStatus.COMPLETED
        assert store.current is None
        assert store.history == [record]

    def test_newer_submission_during_read_stays_current(
        self, png_bytes: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        held = HeldRead(monkeypatch, "a.png")

        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            return make_analysis()

        pipeline, store = _pipeline(analyze)

        async def scenario():
            task_a = asyncio.create_task(pipeline.submit(_upload(png_bytes, "a.png")))
            await held.wait_until_reading()
            record_b = await pipeline.submit(_upload(png_bytes, "b.png"))
            assert store.current == record_b
            held.release.set()
            record_a = await task_a
            return record_a, record_b

        record_a, record_b = asyncio.run(scenario())
        assert record_a.status is ManuscriptStatus.COMPLETED
        assert store.current == record_b
        assert [r.name for r in store.history] == ["a.png", "b.png"]

    def test_failed_read_after_newer_submission_stays_out_of_current(
        self, monkeypatch: pytest.MonkeyPatch, png_bytes: bytes
    ) -> None:
        held = HeldRead(monkeypatch, "a.png")

        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            return make_analysis()

        pipeline, store = _pipeline(analyze)

        async def scenario():
            task_a = asyncio.create_task(pipeline.submit(_upload(b"", "a.png")))
            await held.wait_until_reading()
            record_b = await pipeline.submit(_upload(png_bytes, "b.png"))
            held.release.set()
            record_a = await task_a
            return record_a, record_b

        record_a, record_b = asyncio.run(scenario())
        assert record_a.status is ManuscriptStatus.ERROR
        assert "empty" in record_a.error
        assert store.current == record_b
        assert store.history == [record_b]


class TestReset:
    def test_reset_clears_current_but_not_history(self, png_bytes: bytes) -> None:
        async def analyze(encoded: str, mime_type: str) -> ManuscriptAnalysis:
            return make_analysis()

        pipeline, store = _pipeline(analyze)
        asyncio.run(pipeline.submit(_upload(png_bytes)))
        pipeline.reset()
        assert store.current is None
        assert len(store.history) == 1

    def test_completion_after_reset_stays_out_of_current(self, png_bytes: bytes) -> None:
        analyzer = GatedAnalyzer()
        pipeline, store = _pipeline(analyzer.analyze)

        async def scenario():
            task = asyncio.create_task(pipeline.submit(_upload(png_bytes)))
            await analyzer.wait_for_calls(1)
            pipeline.reset()
            analyzer.gates[0].set_result(make_analysis())
            await task

        asyncio.run(scenario())
        assert store.current is None
        assert len(store.history) == 1


class TestStart:
    def test_tracks_task_until_done(self, png_bytes: bytes) -> None:
        analyzer = GatedAnalyzer()
        pipeline, store = _pipeline(analyzer.analyze)

        async def scenario():
            task = pipeline.start(_upload(png_bytes))
            await analyzer.wait_for_calls(1)
            assert list(pipeline.tasks.values()) == [task]
            assert store.current.id in pipeline.tasks
            analyzer.gates[0].set_result(make_analysis())
            record = await task
            await asyncio.sleep(0)
            return record

        record = asyncio.run(scenario())
        assert record.status is ManuscriptStatus.COMPLETED
        assert pipeline.tasks == {}


@pytest.mark.parametrize(
    "error, expected",
    [
        (RuntimeError("boom"), "boom"),
        (RuntimeError(""), GENERIC_ERROR_MESSAGE),
        (Exception(), GENERIC_ERROR_MESSAGE),
    ],
)
def test_describe_failure(error: Exception, expected: str) -> None:
    assert describe_failure(error) == expected
