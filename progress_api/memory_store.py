import logging
import threading
import uuid
from typing import Callable, Dict, Optional, TypeVar

from .schemas import RegisteredUser, UserProgress, default_progress
from .store import ProgressStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MemoryProgressStore(ProgressStore):
    """Process-local records for offline mode.

    Unknown users read as a default record, so offline calls never fail
    with NotFound. Lives as long as the app that owns it.
    """

    def __init__(self):
        self._records: Dict[str, UserProgress] = {}
        self._profiles: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, user_id: str) -> UserProgress:
        record = self._records.get(user_id)
        if record is None:
            record = default_progress(user_id)
            self._records[user_id] = record
            logger.info("Created mock progress record for %s", user_id)
        return record

    def load(self, user_id: str) -> Optional[UserProgress]:
        # reads never insert; the default record is stored on first write
        with self._lock:
            record = self._records.get(user_id)
            if record is None:
                return default_progress(user_id)
            return record.model_copy(deep=True)

    def create(self, user_id: str) -> UserProgress:
        with self._lock:
            return self._get_or_create(user_id).model_copy(deep=True)

    def mutate(self, user_id: str, fn: Callable[[UserProgress], T]) -> T:
        with self._lock:
            working = self._get_or_create(user_id).model_copy(deep=True)
            result = fn(working)
            self._records[user_id] = working
            return result

    def upsert_user(self, name: str, email: str) -> RegisteredUser:
        with self._lock:
            for user_id, profile in self._profiles.items():
                if profile["email"] == email:
                    profile["name"] = name
                    return RegisteredUser(user_id=user_id, name=name, email=email)

            user_id = str(uuid.uuid4())
            self._profiles[user_id] = {"name": name, "email": email}
            self._get_or_create(user_id)
            return RegisteredUser(user_id=user_id, name=name, email=email)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self._profiles.clear()
