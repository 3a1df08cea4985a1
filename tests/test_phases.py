from progress_api.schemas import PHASE_ORDER, default_progress
from progress_api.tracker import next_phase


def test_next_phase_follows_fixed_order():
    assert next_phase("detail") == "concise"
    assert next_phase("concise") == "creative"


def test_next_phase_is_none_for_last_or_unknown_phase():
    assert next_phase("creative") is None
    assert next_phase("poetry") is None
    assert next_phase("") is None
    assert next_phase(None) is None


def test_default_progress_only_first_phase_unlocked():
    progress = default_progress("u1")

    assert progress.current_phase == "detail"
    assert list(progress.phase_progress) == list(PHASE_ORDER)
    assert progress.phase_progress["detail"].locked is False
    assert progress.phase_progress["concise"].locked is True
    assert progress.phase_progress["creative"].locked is True
    assert all(state.attempts == 0 for state in progress.phase_progress.values())
    assert progress.onboarding_completed is False


def test_progress_serializes_with_camel_case_keys():
    payload = default_progress("u1").model_dump(by_alias=True)

    assert payload["currentPhase"] == "detail"
    assert payload["onboardingCompleted"] is False
    assert payload["phaseProgress"]["detail"] == {
        "attempts": 0,
        "bestScore": 0,
        "completed": False,
        "locked": False,
    }
