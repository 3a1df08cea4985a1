# progress_api/schemas.py
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PHASE_ORDER = ("detail", "concise", "creative")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PhaseState(CamelModel):
    attempts: int = 0
    best_score: float = 0
    completed: bool = False
    locked: bool = True


class UserProgress(CamelModel):
    user_id: str
    current_phase: str = PHASE_ORDER[0]
    phase_progress: Dict[str, PhaseState] = Field(default_factory=dict)
    onboarding_completed: bool = False


def default_phase_progress() -> Dict[str, PhaseState]:
    # only the first phase starts unlocked
    return {
        phase: PhaseState(locked=index > 0)
        for index, phase in enumerate(PHASE_ORDER)
    }


def default_progress(user_id: str) -> UserProgress:
    return UserProgress(user_id=user_id, phase_progress=default_phase_progress())


def dump_phase_progress(phase_progress: Dict[str, PhaseState]) -> Dict[str, dict]:
    return {phase: state.model_dump(by_alias=True) for phase, state in phase_progress.items()}


def load_phase_progress(raw: Optional[Dict[str, dict]]) -> Dict[str, PhaseState]:
    if not raw:
        return default_phase_progress()
    return {phase: PhaseState.model_validate(state) for phase, state in raw.items()}


# ===========================
# Operation results
# ===========================
class ProgressOut(CamelModel):
    current_phase: str
    phase_progress: Dict[str, PhaseState]
    onboarding_completed: bool


class EvaluationResult(CamelModel):
    phase: str
    attempts: int
    best_score: float
    completed: bool
    phase_unlocked: Optional[str] = None


class PhaseChangeResult(CamelModel):
    current_phase: str
    phase_progress: Dict[str, PhaseState]


class OnboardingResult(CamelModel):
    onboarding_completed: bool


class RegisteredUser(BaseModel):
    user_id: str
    name: str
    email: str
