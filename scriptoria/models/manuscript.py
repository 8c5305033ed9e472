"""Manuscript record model and its lifecycle transitions."""

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from scriptoria.errors import InvalidRecordError, InvalidTransitionError
from scriptoria.models.analysis import ManuscriptAnalysis
from scriptoria.models.upload import EncodedImage, UploadedFile


class ManuscriptStatus(Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ManuscriptStatus.COMPLETED, ManuscriptStatus.ERROR)


def new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ManuscriptRecord:
    """One uploaded image tracked through analysis.

    Records are immutable: ``start``, ``with_payload``, ``complete`` and
    ``fail`` return new records. ``result`` is set iff the status is COMPLETED and ``error`` iff it
    is ERROR.
    """

    name: str
    mime_type: Optional[str] = None
    preview: Optional[str] = None
    encoded: Optional[str] = None
    id: str = field(default_factory=new_record_id)
    created_at: float = field(default_factory=time.time)
    status: ManuscriptStatus = ManuscriptStatus.IDLE
    result: Optional[ManuscriptAnalysis] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.result is not None and self.error is not None:
            raise InvalidRecordError(
                f"Record {self.id} cannot carry both a result and an error"
            )
        if (self.result is not None) != (self.status is ManuscriptStatus.COMPLETED):
            raise InvalidRecordError(
                f"Record {self.id} has status {self.status.value} "
                f"but result is {'set' if self.result is not None else 'missing'}"
            )
        if (self.error is not None) != (self.status is ManuscriptStatus.ERROR):
            raise InvalidRecordError(
                f"Record {self.id} has status {self.status.value} "
                f"but error is {'set' if self.error is not None else 'missing'}"
            )

    @classmethod
    def from_upload(
        cls, upload: UploadedFile, record_id: Optional[str] = None
    ) -> "ManuscriptRecord":
        """Create a processing record for an upload that has not been read yet."""
        return cls(
            name=upload.name,
            mime_type=upload.content_type,
            id=record_id or new_record_id(),
        ).start()

    def with_payload(self, image: EncodedImage) -> "ManuscriptRecord":
        """Attach the encoded image. The payload can only be set once."""
        if self.has_payload:
            raise InvalidTransitionError(f"Record {self.id} already has a payload")
        self._require(ManuscriptStatus.PROCESSING, ManuscriptStatus.PROCESSING)
        return replace(
            self,
            mime_type=self.mime_type or image.mime_type,
            preview=image.preview,
            encoded=image.encoded,
        )

    @property
    def has_payload(self) -> bool:
        return self.encoded is not None

    def _require(self, status: ManuscriptStatus, target: ManuscriptStatus) -> None:
        if self.status is not status:
            raise InvalidTransitionError(
                f"Record {self.id} cannot move from {self.status.value} to {target.value}"
            )

    def start(self) -> "ManuscriptRecord":
        self._require(ManuscriptStatus.IDLE, ManuscriptStatus.PROCESSING)
        return replace(self, status=ManuscriptStatus.PROCESSING)

    def complete(self, result: ManuscriptAnalysis) -> "ManuscriptRecord":
        self._require(ManuscriptStatus.PROCESSING, ManuscriptStatus.COMPLETED)
        return replace(self, status=ManuscriptStatus.COMPLETED, result=result)

    def fail(self, message: str) -> "ManuscriptRecord":
        self._require(ManuscriptStatus.PROCESSING, ManuscriptStatus.ERROR)
        return replace(self, status=ManuscriptStatus.ERROR, error=message)
