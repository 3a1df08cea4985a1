# progress_api/tracker.py
import logging
import math
from typing import Optional

from .config import Settings
from .errors import ForbiddenError, GoneError, NotFoundError, ValidationError
from .schemas import (
    PHASE_ORDER,
    EvaluationResult,
    OnboardingResult,
    PhaseChangeResult,
    PhaseState,
    ProgressOut,
    RegisteredUser,
    UserProgress,
)
from .store import ProgressStore

logger = logging.getLogger(__name__)

LEGACY_UPDATE_MESSAGE = "This endpoint is deprecated; use /api/progress/update-after-evaluation"


def next_phase(phase: Optional[str]) -> Optional[str]:
    """Return the phase after ``phase``, or None for the last or an unknown phase."""
    if phase not in PHASE_ORDER:
        return None
    index = PHASE_ORDER.index(phase)
    if index + 1 >= len(PHASE_ORDER):
        return None
    return PHASE_ORDER[index + 1]


class ProgressTracker:
    """Moves one user through the detail -> concise -> creative phases.

    The store decides where records live (memory for offline mode, SQL for
    online mode); the tracker only knows the rules.
    """

    def __init__(self, store: ProgressStore, settings: Settings):
        self.store = store
        self.settings = settings

    @property
    def mode(self) -> str:
        return self.settings.mode

    def _user(self, user_id: Optional[str]) -> str:
        user_id = (user_id or "").strip()
        return user_id or self.settings.default_user_id

    # ===========================
    # Read
    # ===========================
    def get_progress(self, user_id: Optional[str] = None) -> ProgressOut:
        user_id = self._user(user_id)
        progress = self.store.load(user_id)
        if progress is None:
            logger.warning("User not found: %s", user_id)
            raise NotFoundError("User not found")

        logger.debug("Serving progress for %s: currentPhase=%s", user_id, progress.current_phase)
        return ProgressOut(
            current_phase=progress.current_phase,
            phase_progress=progress.phase_progress,
            onboarding_completed=progress.onboarding_completed,
        )

    # ===========================
    # Evaluation results
    # ===========================
    def record_evaluation(
        self,
        phase: Optional[str],
        score: Optional[float],
        user_id: Optional[str] = None,
    ) -> EvaluationResult:
        if not phase or score is None:
            raise ValidationError("Please provide both phase and score")
        if not math.isfinite(score):
            raise ValidationError("Score must be a finite number")

        user_id = self._user(user_id)
        threshold = self.settings.completion_threshold
        logger.info("Progress update triggered: user=%s phase=%s score=%s", user_id, phase, score)

        def apply(progress: UserProgress) -> EvaluationResult:
            # phases first seen here start unlocked, unlike the default record
            state = progress.phase_progress.setdefault(phase, PhaseState(locked=False))

            state.attempts += 1
            if score > state.best_score:
                state.best_score = score
            # latest score wins, even after an earlier completion
            state.completed = score >= threshold

            unlocked = None
            upcoming = next_phase(phase)
            if state.completed and upcoming:
                upcoming_state = progress.phase_progress.get(upcoming)
                if upcoming_state is not None and upcoming_state.locked:
                    upcoming_state.locked = False
                    unlocked = upcoming

            return EvaluationResult(
                phase=phase,
                attempts=state.attempts,
                best_score=state.best_score,
                completed=state.completed,
                phase_unlocked=unlocked,
            )

        result = self._mutate(user_id, apply)
        if result.phase_unlocked:
            logger.info("Phase unlocked for %s: %s", user_id, result.phase_unlocked)
        return result

    def update_progress_legacy(self) -> None:
        raise GoneError(LEGACY_UPDATE_MESSAGE)

    # ===========================
    # Phase selection
    # ===========================
    def change_phase(self, phase: Optional[str], user_id: Optional[str] = None) -> PhaseChangeResult:
        if not phase or phase not in PHASE_ORDER:
            raise ValidationError("Valid phase is required")

        user_id = self._user(user_id)

        def apply(progress: UserProgress) -> PhaseChangeResult:
            state = progress.phase_progress.get(phase)
            # a missing entry follows the default: only the first phase is open
            locked = state.locked if state is not None else phase != PHASE_ORDER[0]
            if locked:
                raise ForbiddenError("Phase is locked")

            progress.current_phase = phase
            return PhaseChangeResult(
                current_phase=progress.current_phase,
                phase_progress=progress.phase_progress,
            )

        try:
            result = self._mutate(user_id, apply)
        except ForbiddenError:
            logger.warning("Refused change to locked phase %s for %s", phase, user_id)
            raise

        logger.info("Changed phase for %s to: %s", user_id, phase)
        return result

    # ===========================
    # Onboarding
    # ===========================
    def complete_onboarding(self, user_id: Optional[str] = None) -> OnboardingResult:
        user_id = self._user(user_id)

        def apply(progress: UserProgress) -> OnboardingResult:
            progress.onboarding_completed = True
            return OnboardingResult(onboarding_completed=progress.onboarding_completed)

        result = self._mutate(user_id, apply)
        logger.info("Onboarding completed for %s", user_id)
        return result

    # ===========================
    # Users
    # ===========================
    def register_user(self, name: Optional[str], email: Optional[str]) -> RegisteredUser:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name:
            raise ValidationError("name is required")
        if not email:
            raise ValidationError("email is required")

        user = self.store.upsert_user(name, email)
        logger.info("Registered user %s", user.user_id)
        return user

    def reset(self) -> None:
        """Drop every record in the active store. Meant for tests."""
        self.store.reset()

    def _mutate(self, user_id: str, fn):
        try:
            return self.store.mutate(user_id, fn)
        except NotFoundError:
            logger.warning("User not found: %s", user_id)
            raise
