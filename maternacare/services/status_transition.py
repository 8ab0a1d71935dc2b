"""Optimistic status and payment-status changes with debounce and rollback.

Each (appointment, field) pair moves through three states:

    Committed --set--> Pending --persist ok--> Committed
                          |
                          +--persist failed--> Reverting --> Committed (old value)

Calls for the same pair inside the debounce window supersede each other;
only the last value is persisted, and every waiting caller receives that
call's result.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from maternacare.config import settings
from maternacare.core.exceptions import RecordNotFoundError
from maternacare.crud.appointment import crud_appointment
from maternacare.schemas.appointment import normalize_payment_status, normalize_status

logger = logging.getLogger(__name__)

STATUS_FIELD = "status"
PAYMENT_STATUS_FIELD = "payment_status"

PersistFn = Callable[[int, str, str], Awaitable[None]]
ErrorFn = Callable[[int, str, Exception], None]
SuccessFn = Callable[[int, str, str], None]

Key = Tuple[int, str]


class TransitionState(str, enum.Enum):
    COMMITTED = "Committed"
    PENDING = "Pending"
    REVERTING = "Reverting"


@dataclass
class FieldState:
    value: Optional[str]
    committed: Optional[str]
    state: TransitionState = TransitionState.COMMITTED
    generation: int = 0


class StatusTransitionHelper:
    """
    Local view of appointment statuses that is updated before the backend
    confirms a change.

    Args:
        persist: Coroutine writing (appointment_id, field, value) to the backend
        on_error: Called with (appointment_id, field, error) on rejection or failure
        on_success: Called with (appointment_id, field, value) after a write is confirmed
        debounce_seconds: Quiet period before persisting, defaults to STATUS_DEBOUNCE_SECONDS
    """

    def __init__(
        self,
        persist: PersistFn,
        *,
        on_error: Optional[ErrorFn] = None,
        on_success: Optional[SuccessFn] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self._persist = persist
        self._on_error = on_error
        self._on_success = on_success
        self.debounce_seconds = (
            settings.STATUS_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self._fields: Dict[Key, FieldState] = {}
        self._timers: Dict[Key, asyncio.Task] = {}
        self._waiters: Dict[Key, List[asyncio.Future]] = {}

    # ==================== LOCAL STATE ====================

    def load(self, appointment_id: int, *, status: Optional[str] = None, payment_status: Optional[str] = None) -> None:
        """Seed confirmed values, e.g. from a freshly fetched appointment list."""
        for field, value in ((STATUS_FIELD, status), (PAYMENT_STATUS_FIELD, payment_status)):
            if value is not None:
                self._fields[(appointment_id, field)] = FieldState(value=value, committed=value)

    def get(self, appointment_id: int, field: str = STATUS_FIELD) -> Optional[str]:
        entry = self._fields.get((appointment_id, field))
        return entry.value if entry else None

    def state_of(self, appointment_id: int, field: str = STATUS_FIELD) -> TransitionState:
        entry = self._fields.get((appointment_id, field))
        return entry.state if entry else TransitionState.COMMITTED

    # ==================== TRANSITIONS ====================

    async def set_status(self, appointment_id: int, new_status: str) -> bool:
        try:
            value = normalize_status(new_status)
        except ValueError as e:
            self._notify_error(appointment_id, STATUS_FIELD, e)
            return False
        return await self._transition(appointment_id, STATUS_FIELD, value)

    async def set_payment_status(self, appointment_id: int, new_payment_status: str) -> bool:
        try:
            value = normalize_payment_status(new_payment_status)
        except ValueError as e:
            self._notify_error(appointment_id, PAYMENT_STATUS_FIELD, e)
            return False
        return await self._transition(appointment_id, PAYMENT_STATUS_FIELD, value)

    async def _transition(self, appointment_id: int, field: str, value: str) -> bool:
        key = (appointment_id, field)
        entry = self._fields.setdefault(key, FieldState(value=None, committed=None))
        entry.value = value
        entry.state = TransitionState.PENDING
        entry.generation += 1

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(key, []).append(waiter)

        previous = self._timers.pop(key, None)
        if previous is not None:
            previous.cancel()
        self._timers[key] = asyncio.create_task(self._flush(key, value, entry.generation))

        return await waiter

    async def _flush(self, key: Key, value: str, generation: int) -> None:
        await asyncio.sleep(self.debounce_seconds)

        # Past the debounce window this write can no longer be superseded
        if self._timers.get(key) is asyncio.current_task():
            del self._timers[key]
        waiters = self._waiters.pop(key, [])
        appointment_id, field = key
        entry = self._fields[key]
        result = False

        try:
            await self._persist(appointment_id, field, value)
        except Exception as e:
            logger.warning(f"Persisting {field}={value} for appointment {appointment_id} failed: {e}")
            if entry.generation == generation:
                entry.state = TransitionState.REVERTING
                entry.value = entry.committed
            self._notify_error(appointment_id, field, e)
            if entry.generation == generation:
                entry.state = TransitionState.COMMITTED
        else:
            entry.committed = value
            # A newer write that already settled left the local value behind the backend
            if entry.generation == generation or entry.state == TransitionState.COMMITTED:
                entry.value = value
                entry.state = TransitionState.COMMITTED
            self._notify_success(appointment_id, field, value)
            result = True
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_result(result)

    def _notify_error(self, appointment_id: int, field: str, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(appointment_id, field, error)
        except Exception:
            logger.exception(f"Error callback failed for appointment {appointment_id} ({field})")

    def _notify_success(self, appointment_id: int, field: str, value: str) -> None:
        if self._on_success is None:
            return
        try:
            self._on_success(appointment_id, field, value)
        except Exception:
            logger.exception(f"Success callback failed for appointment {appointment_id} ({field})")


def database_persist(session_factory) -> PersistFn:
    """Persist capability writing through the appointment repository."""
    def _write(appointment_id: int, field: str, value: str) -> None:
        db = session_factory()
        try:
            appointment = crud_appointment.get(db, appointment_id)
            if appointment is None:
                raise RecordNotFoundError("Appointment", appointment_id)
            crud_appointment.update(db, db_obj=appointment, obj_in={field: value})
        finally:
            db.close()

    async def persist(appointment_id: int, field: str, value: str) -> None:
        await asyncio.to_thread(_write, appointment_id, field, value)

    return persist
