"""Drives one manuscript through read → analyze → completed/error."""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from scriptoria.encoding import encode_upload
from scriptoria.errors import GENERIC_ERROR_MESSAGE, AnalysisError, FileReadError
from scriptoria.models.analysis import ManuscriptAnalysis
from scriptoria.models.manuscript import ManuscriptRecord, new_record_id
from scriptoria.models.upload import UploadedFile
from scriptoria.store import ManuscriptStore

log = logging.getLogger(__name__)

AnalyzeFn = Callable[[str, str], Awaitable[ManuscriptAnalysis]]


def describe_failure(error: BaseException, fallback: str = GENERIC_ERROR_MESSAGE) -> str:
    message = str(error).strip()
    return message or fallback


class ProcessingPipeline:
    """Submits uploads for analysis and records the outcome in the store.

    The record is made current before the file is read, so a reset or a newer
    submission during the read wins. Every later step, from the read to the
    analysis call, is addressed to the record id and ends as a ``completed``
    or ``error`` transition; ``submit`` never raises.
    """

    def __init__(
        self,
        store: ManuscriptStore,
        analyze: AnalyzeFn,
        generic_error_message: str = GENERIC_ERROR_MESSAGE,
        default_mime_type: str = "application/octet-stream",
    ) -> None:
        self.store = store
        self.analyze = analyze
        self.generic_error_message = generic_error_message
        self.default_mime_type = default_mime_type
        self.tasks: Dict[str, asyncio.Task] = {}

    async def submit(
        self, upload: UploadedFile, record_id: Optional[str] = None
    ) -> ManuscriptRecord:
        """Process one upload and return the record in its final state."""
        record_id = record_id or new_record_id()
        log.info(f"Submitting {upload.name} as record {record_id}")
        self.store.begin(ManuscriptRecord.from_upload(upload, record_id))

        try:
            image = await asyncio.to_thread(
                encode_upload, upload, self.default_mime_type
            )
        except FileReadError as e:
            return self.store.fail(record_id, str(e))
        except Exception as e:
            log.error(f"Unexpected error reading {upload.name}: {e}", exc_info=True)
            return self.store.fail(
                record_id, f"Could not read {upload.name}: {describe_failure(e)}"
            )

        log.debug(f"Encoded {image.name} ({image.mime_type}, ~{image.size} bytes)")
        record = self.store.attach_payload(record_id, image)

        try:
            result = await self.analyze(record.encoded, record.mime_type)
            if not isinstance(result, ManuscriptAnalysis):
                raise AnalysisError(
                    f"The analysis service returned {type(result).__name__}, "
                    "not a manuscript analysis"
                )
            completed = self.store.complete(record_id, result)
        except Exception as e:
            log.error(f"Analysis failed for record {record_id}: {e!r}")
            return self.store.fail(
                record_id, describe_failure(e, self.generic_error_message)
            )

        log.info(
            f"Record {record_id} completed with confidence {result.confidence_score}"
        )
        return completed

    def start(self, upload: UploadedFile) -> asyncio.Task:
        """Schedule a submission on the running loop and track its task."""
        record_id = new_record_id()
        task = asyncio.create_task(self.submit(upload, record_id))
        self.tasks[record_id] = task
        task.add_done_callback(lambda _: self.tasks.pop(record_id, None))
        return task

    def reset(self) -> None:
        """Return to the empty upload state. In-flight calls keep running."""
        self.store.clear_current()
