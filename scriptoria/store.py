"""Application state: the current manuscript, history and display mode."""

import logging
from typing import Callable, Dict, List, Optional

from scriptoria.errors import InvalidTransitionError
from scriptoria.models.analysis import ManuscriptAnalysis
from scriptoria.models.manuscript import ManuscriptRecord, ManuscriptStatus
from scriptoria.models.upload import EncodedImage
from scriptoria.viewport import DisplayMode

log = logging.getLogger(__name__)

StoreListener = Callable[["ManuscriptStore"], None]


class ManuscriptStore:
    """Owns every mutation of the current record, the history and the mode.

    Status transitions are addressed by record id. A record that is no longer
    current (replaced by a newer submission, or cleared by a reset) can still
    finish: a completed record still lands in history, but only the record
    that is current at that moment is ever written to the current slot.
    """

    def __init__(self, mode: DisplayMode = DisplayMode.FULL) -> None:
        self._current: Optional[ManuscriptRecord] = None
        self._history: List[ManuscriptRecord] = []
        self._in_flight: Dict[str, ManuscriptRecord] = {}
        self._mode = mode
        self._listeners: List[StoreListener] = []

    @property
    def current(self) -> Optional[ManuscriptRecord]:
        return self._current

    @property
    def history(self) -> List[ManuscriptRecord]:
        """Completed records, most recent first."""
        return list(self._history)

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    def recent_history(self, limit: int) -> List[ManuscriptRecord]:
        return self._history[:limit]

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _is_current(self, record_id: str) -> bool:
        return self._current is not None and self._current.id == record_id

    def begin(self, record: ManuscriptRecord) -> None:
        """Make a freshly submitted record current."""
        if record.status is not ManuscriptStatus.PROCESSING:
            raise InvalidTransitionError(
                f"Record {record.id} must be processing to begin, not {record.status.value}"
            )
        if record.id in self._in_flight:
            raise InvalidTransitionError(f"Record {record.id} is already in flight")
        self._in_flight[record.id] = record
        self._current = record
        log.debug(f"Record {record.id} ({record.name}) is now current")
        self._notify()

    def _in_flight_record(self, record_id: str) -> ManuscriptRecord:
        record = self._in_flight.get(record_id)
        if record is None:
            raise InvalidTransitionError(f"Record {record_id} is not processing")
        return record

    def attach_payload(self, record_id: str, image: EncodedImage) -> ManuscriptRecord:
        """Set the encoded image on an in-flight record once its file is read."""
        record = self._in_flight_record(record_id).with_payload(image)
        self._in_flight[record_id] = record
        if self._is_current(record_id):
            self._current = record
            self._notify()
        return record

    def complete(self, record_id: str, result: ManuscriptAnalysis) -> ManuscriptRecord:
        """Attach a result to an in-flight record and prepend it to history."""
        completed = self._in_flight_record(record_id).complete(result)
        del self._in_flight[record_id]
        self._history.insert(0, completed)
        if self._is_current(record_id):
            self._current = completed
        else:
            log.info(f"Record {record_id} completed after being replaced")
        self._notify()
        return completed

    def fail(self, record_id: str, message: str) -> ManuscriptRecord:
        """Attach an error message to an in-flight record."""
        failed = self._in_flight_record(record_id).fail(message)
        del self._in_flight[record_id]
        if self._is_current(record_id):
            self._current = failed
        else:
            log.info(f"Record {record_id} failed after being replaced")
        self._notify()
        return failed

    def clear_current(self) -> None:
        if self._current is None:
            return
        log.debug(f"Clearing current record {self._current.id}")
        self._current = None
        self._notify()

    def show(self, record_id: str) -> ManuscriptRecord:
        """Make a history entry the current record again."""
        for record in self._history:
            if record.id == record_id:
                self._current = record
                self._notify()
                return record
        raise KeyError(record_id)

    def update_mode(self, mode: DisplayMode) -> bool:
        """Set the derived display mode. Returns True if it changed."""
        if mode is self._mode:
            return False
        log.debug(f"Display mode {self._mode.value} -> {mode.value}")
        self._mode = mode
        self._notify()
        return True
