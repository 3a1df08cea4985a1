from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..schemas import EvaluationResult, OnboardingResult, PhaseChangeResult, ProgressOut
from ..tracker import ProgressTracker

router = APIRouter(prefix="/api/progress", tags=["progress"])


def get_tracker(request: Request) -> ProgressTracker:
    return request.app.state.tracker


# phase/score are optional here so a missing field becomes a 400 from the
# tracker rather than a schema error
class EvaluationUpdateIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    phase: Optional[str] = None
    score: Optional[float] = Field(None, allow_inf_nan=False)
    user_id: Optional[str] = None


class PhaseChangeIn(BaseModel):
    phase: Optional[str] = None


@router.get("", response_model=ProgressOut)
def get_progress(
    user_id: Optional[str] = None,
    tracker: ProgressTracker = Depends(get_tracker),
) -> ProgressOut:
    return tracker.get_progress(user_id)


@router.post("/update-after-evaluation", response_model=EvaluationResult)
def update_after_evaluation(
    req: EvaluationUpdateIn,
    user_id: Optional[str] = None,
    tracker: ProgressTracker = Depends(get_tracker),
) -> EvaluationResult:
    return tracker.record_evaluation(req.phase, req.score, req.user_id or user_id)


@router.post("")
def update_progress(tracker: ProgressTracker = Depends(get_tracker)):
    # Deprecated: the body is never read, so every payload gets the 410
    tracker.update_progress_legacy()


@router.post("/phase", response_model=PhaseChangeResult)
def change_phase(
    req: PhaseChangeIn,
    user_id: Optional[str] = None,
    tracker: ProgressTracker = Depends(get_tracker),
) -> PhaseChangeResult:
    return tracker.change_phase(req.phase, user_id)


@router.post("/onboarding-complete", response_model=OnboardingResult)
def complete_onboarding(
    user_id: Optional[str] = None,
    tracker: ProgressTracker = Depends(get_tracker),
) -> OnboardingResult:
    return tracker.complete_onboarding(user_id)
