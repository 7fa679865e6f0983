"""
Queue service: owns the current day's appointment list and the
"now serving" display derived from it.
"""
from datetime import date, datetime, time
from typing import Dict, Any, List, Optional
import logging
import threading

from checkin_queue.core.clock import Clock, make_clock
from checkin_queue.core.exceptions import NotFoundError, StorageError, ValidationError
from checkin_queue.core.storage import DailyStore
from checkin_queue.models.appointment import Appointment, DisplaySnapshot, HistoryAction, HistoryEntry
from checkin_queue.services.notification_service import DisplayNotifier

logger = logging.getLogger(__name__)


class QueueService:
    """
    Single owner of the in-memory appointment list and the active-hours flag.

    Every mutation is persisted before the lock is released, so the
    snapshot on disk always matches the list. Snapshot and history files
    are keyed by current_day, which only roll_over() advances.
    """

    def __init__(
        self,
        store: DailyStore,
        notifier: Optional[DisplayNotifier] = None,
        clock: Optional[Clock] = None,
        display_limit: int = 4,
        active_start: time = time(8, 30),
        active_end: time = time(18, 0),
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock or make_clock()
        self.display_limit = display_limit
        self.active_start = active_start
        self.active_end = active_end

        self._lock = threading.RLock()
        self._appointments: List[Appointment] = []
        self._active = False
        self._last_id = 0
        self._day: date = self.clock().date()

    @property
    def current_day(self) -> date:
        return self._day

    @property
    def system_active(self) -> bool:
        return self._active

    def load(self, day: Optional[date] = None) -> int:
        """
        Replace the in-memory list with the stored snapshot for a day.

        Args:
            day: Business day to load; today when omitted

        Returns:
            Number of appointments loaded
        """
        with self._lock:
            self._day = day or self.clock().date()
            self._appointments = self.store.load_day(self._day)
            for appointment in self._appointments:
                if appointment.id.isdigit():
                    self._last_id = max(self._last_id, int(appointment.id))
            logger.info(f"[Queue] Loaded {len(self._appointments)} appointment(s) for {self._day}")
            return len(self._appointments)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, name: str, phone: str, license_plate: str, is_outbound: bool = False) -> Appointment:
        """
        Register a new appointment at the end of the queue.

        Raises:
            ValidationError: If name, phone or license plate is missing or blank
            StorageError: If the snapshot could not be written (nothing is kept)
        """
        fields = {
            "name": (name or "").strip(),
            "phone": (phone or "").strip(),
            "licensePlate": (license_plate or "").strip().upper(),
        }
        missing = [key for key, value in fields.items() if not value]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

        with self._lock:
            now = self.clock()
            appointment = Appointment(
                id=self._next_id(now),
                name=fields["name"],
                phone=fields["phone"],
                license_plate=fields["licensePlate"],
                is_outbound=bool(is_outbound),
                timestamp=now,
                outbound_time=now if is_outbound else None,
            )
            self._appointments.append(appointment)
            try:
                self.store.save_day(self._day, self._appointments)
            except StorageError:
                self._appointments.pop()
                raise
            logger.info(f"[Queue] Created appointment {appointment.id} for plate {appointment.license_plate}")

        if not appointment.is_outbound:
            self.publish_display()
        return appointment

    def mark_outbound(self, appointment_id: str) -> Appointment:
        """
        Release an appointment from the waiting queue.

        Marking an appointment that is already outbound returns it unchanged:
        outboundTime is set exactly once and no second history entry is written.

        Raises:
            NotFoundError: If the id is unknown for the current day
            StorageError: If the snapshot could not be written (change is undone)
        """
        with self._lock:
            appointment = self.get(appointment_id)
            if appointment.is_outbound:
                logger.info(f"[Queue] Appointment {appointment_id} already outbound, nothing to do")
                return appointment

            now = self.clock()
            appointment.is_outbound = True
            appointment.outbound_time = now
            try:
                self.store.save_day(self._day, self._appointments)
            except StorageError:
                appointment.is_outbound = False
                appointment.outbound_time = None
                raise

            entry = HistoryEntry(action=HistoryAction.OUTBOUND, recorded_at=now, appointments=[appointment])
            try:
                self.store.append_history(self._day, entry)
            except StorageError as e:
                logger.error(f"[Queue] Outbound {appointment_id} saved but history append failed: {e}", exc_info=True)
            logger.info(f"[Queue] Appointment {appointment_id} marked outbound")

        self.publish_display()
        return appointment

    def roll_over(self, now: Optional[datetime] = None) -> HistoryEntry:
        """
        Archive the closing day's list as one daily_save entry and start a new empty day.

        Args:
            now: Instant of the rollover; its date becomes the new business day

        Returns:
            The archived history entry
        """
        with self._lock:
            now = now or self.clock()
            closing_day = self._day
            entry = HistoryEntry(
                action=HistoryAction.DAILY_SAVE,
                recorded_at=now,
                appointments=list(self._appointments),
            )
            self.store.append_history(closing_day, entry)

            self._appointments = []
            self._day = now.date()
            self.store.save_day(self._day, self._appointments)
            logger.info(
                f"[Queue] Archived {len(entry.appointments)} appointment(s) for {closing_day}, "
                f"started new day {self._day}"
            )

        self.publish_display()
        return entry

    def refresh_active_status(self, now: Optional[datetime] = None) -> bool:
        """
        Recompute whether the desk is inside active hours.

        Args:
            now: Local wall-clock instant; the service clock when omitted

        Returns:
            True if the flag changed
        """
        now = now or self.clock()
        wall = now.time().replace(second=0, microsecond=0)
        active = self.active_start <= wall < self.active_end
        with self._lock:
            changed = active != self._active
            self._active = active
        if changed:
            logger.info(f"[Queue] System is now {'active' if active else 'inactive'} ({now:%H:%M})")
        return changed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, appointment_id: str) -> Appointment:
        with self._lock:
            for appointment in self._appointments:
                if appointment.id == appointment_id:
                    return appointment
        raise NotFoundError(f"Appointment '{appointment_id}' not found")

    def list_all(self) -> List[Appointment]:
        with self._lock:
            return list(self._appointments)

    def list_waiting(self) -> List[Appointment]:
        """Non-outbound appointments in insertion order."""
        with self._lock:
            return [a for a in self._appointments if not a.is_outbound]

    def compute_display(self) -> DisplaySnapshot:
        """Earliest waiting appointments first, capped at display_limit."""
        with self._lock:
            waiting = self.list_waiting()
            ordered = sorted(waiting, key=lambda a: a.timestamp)
            return DisplaySnapshot(
                appointments=ordered[:self.display_limit],
                total_waiting=len(waiting),
                system_active=self._active,
            )

    def load_history(self, day: Optional[date] = None) -> List[HistoryEntry]:
        return self.store.load_history(day or self._day)

    # ------------------------------------------------------------------
    # Notification
    # ------------------------------------------------------------------

    def display_payload(self) -> Dict[str, Any]:
        return self.compute_display().to_json()

    def publish_display(self) -> None:
        if self.notifier is not None:
            self.notifier.publish(self.display_payload())

    def _next_id(self, now: datetime) -> str:
        # Epoch milliseconds, bumped past the last issued id on collision
        candidate = int(now.timestamp() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)
