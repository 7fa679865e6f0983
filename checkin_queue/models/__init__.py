from checkin_queue.models.appointment import Appointment, HistoryEntry, HistoryAction, DisplaySnapshot

__all__ = ["Appointment", "HistoryEntry", "HistoryAction", "DisplaySnapshot"]
