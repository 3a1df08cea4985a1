# progress_api/store.py
import logging
import threading
from typing import Callable, Optional, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from .db import Base, ensure_sqlite_dir, make_session_factory
from .errors import NotFoundError
from .models import User
from .schemas import (
    PHASE_ORDER,
    RegisteredUser,
    UserProgress,
    default_phase_progress,
    dump_phase_progress,
    load_phase_progress,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProgressStore:
    """Contract shared by the offline and online stores.

    Every mutation is a single read-modify-write: ``mutate`` loads the
    record, hands it to ``fn``, saves the whole record back and returns
    whatever ``fn`` returned. If ``fn`` raises, nothing is saved.
    """

    def load(self, user_id: str) -> Optional[UserProgress]:
        raise NotImplementedError

    def create(self, user_id: str) -> UserProgress:
        raise NotImplementedError

    def mutate(self, user_id: str, fn: Callable[[UserProgress], T]) -> T:
        raise NotImplementedError

    def upsert_user(self, name: str, email: str) -> RegisteredUser:
        raise NotImplementedError

    def reset(self) -> None:
        raise NotImplementedError


# ===========================
# SQL-backed store (online mode)
# ===========================
def _to_progress(user: User) -> UserProgress:
    current = user.current_phase if user.current_phase else PHASE_ORDER[0]
    return UserProgress(
        user_id=user.user_id,
        current_phase=current,
        phase_progress=load_phase_progress(user.phase_progress),
        onboarding_completed=bool(user.onboarding_completed),
    )


def _apply(user: User, progress: UserProgress) -> None:
    # assign a fresh dict so the JSON column is flagged dirty
    user.current_phase = progress.current_phase
    user.phase_progress = dump_phase_progress(progress.phase_progress)
    user.onboarding_completed = progress.onboarding_completed


class SqlProgressStore(ProgressStore):
    """User rows in a SQL database (online mode).

    Schema setup waits for the first session. At that point the record for
    ``default_user_id`` is seeded, so calls without a user id have a
    record to work on.
    """

    def __init__(self, engine: Engine, default_user_id: Optional[str] = None):
        self._engine = engine
        self._default_user_id = default_user_id
        self._session_factory = make_session_factory(engine)
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    def _session(self) -> Session:
        if not self._schema_ready:
            with self._schema_lock:
                if not self._schema_ready:
                    ensure_sqlite_dir(self._engine)
                    Base.metadata.create_all(bind=self._engine)
                    self._seed_default_user()
                    self._schema_ready = True
        return self._session_factory()

    def _seed_default_user(self) -> None:
        if not self._default_user_id:
            return
        db = self._session_factory()
        try:
            if self._find(db, self._default_user_id) is None:
                self._add_record(db, self._default_user_id)
        finally:
            db.close()

    def _add_record(self, db: Session, user_id: str) -> User:
        user = User(
            user_id=user_id,
            phase_progress=dump_phase_progress(default_phase_progress()),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Created progress record for %s", user_id)
        return user

    def _find(self, db: Session, user_id: str, for_update: bool = False) -> Optional[User]:
        query = db.query(User).filter(User.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def load(self, user_id: str) -> Optional[UserProgress]:
        db = self._session()
        try:
            user = self._find(db, user_id)
            if user is None:
                return None
            return _to_progress(user)
        finally:
            db.close()

    def create(self, user_id: str) -> UserProgress:
        db = self._session()
        try:
            user = self._find(db, user_id)
            if user is None:
                user = self._add_record(db, user_id)
            return _to_progress(user)
        finally:
            db.close()

    def mutate(self, user_id: str, fn: Callable[[UserProgress], T]) -> T:
        db = self._session()
        try:
            user = self._find(db, user_id, for_update=True)
            if user is None:
                raise NotFoundError("User not found")
            progress = _to_progress(user)
            result = fn(progress)
            _apply(user, progress)
            db.commit()
            return result
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def upsert_user(self, name: str, email: str) -> RegisteredUser:
        db = self._session()
        try:
            user = db.query(User).filter(User.email == email).first()
            if user:
                # update name in case it changed
                user.name = name
            else:
                user = User(
                    name=name,
                    email=email,
                    phase_progress=dump_phase_progress(default_phase_progress()),
                )
                db.add(user)
            db.commit()
            db.refresh(user)
            return RegisteredUser(user_id=user.user_id, name=user.name, email=user.email)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def reset(self) -> None:
        db = self._session()
        try:
            db.query(User).delete()
            db.commit()
        finally:
            db.close()
        self._seed_default_user()
