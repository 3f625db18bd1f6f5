"""Per-doctor serialization of calendar writes inside one process."""

from threading import Lock


class DoctorLocks:
    """One lock per doctor, created on first use."""

    def __init__(self):
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def for_doctor(self, doctor_id: str) -> Lock:
        lock = self._locks.get(doctor_id)
        if lock is not None:
            return lock

        with self._guard:
            lock = self._locks.get(doctor_id)
            if lock is None:
                lock = Lock()
                self._locks[doctor_id] = lock
            return lock


# Shared by bookings and availability updates so that a doctor's calendar is
# changed by one request at a time no matter which handler runs it.
booking_locks = DoctorLocks()
