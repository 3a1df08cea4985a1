import pytest

from progress_api.db import make_engine
from progress_api.errors import ForbiddenError, NotFoundError
from progress_api.store import SqlProgressStore


def test_sql_store_round_trips_progress(sql_store):
    assert sql_store.load("learner") is None
    sql_store.create("learner")

    def promote(progress):
        progress.current_phase = "concise"
        progress.phase_progress["concise"].locked = False
        progress.phase_progress["detail"].best_score = 9.4
        progress.onboarding_completed = True
        return "done"

    assert sql_store.mutate("learner", promote) == "done"

    reloaded = sql_store.load("learner")
    assert reloaded.current_phase == "concise"
    assert reloaded.phase_progress["concise"].locked is False
    assert reloaded.phase_progress["detail"].best_score == 9.4
    assert reloaded.onboarding_completed is True


def test_sql_store_create_keeps_existing_record(sql_store):
    sql_store.create("learner")
    sql_store.mutate("learner", lambda p: setattr(p, "onboarding_completed", True))

    again = sql_store.create("learner")

    assert again.onboarding_completed is True


def test_sql_store_mutate_missing_user(sql_store):
    with pytest.raises(NotFoundError):
        sql_store.mutate("ghost", lambda p: None)


def test_failed_mutation_is_not_saved(sql_store, memory_store):
    for store in (sql_store, memory_store):
        store.create("learner")

        def half_done(progress):
            progress.current_phase = "creative"
            raise ForbiddenError("Phase is locked")

        with pytest.raises(ForbiddenError):
            store.mutate("learner", half_done)

        assert store.load("learner").current_phase == "detail"


def test_memory_store_hands_out_copies(memory_store):
    progress = memory_store.load("learner")
    progress.phase_progress["detail"].attempts = 99

    assert memory_store.load("learner").phase_progress["detail"].attempts == 0


def test_sql_store_reset_removes_users(sql_store):
    sql_store.upsert_user("Ada", "ada@example.com")
    sql_store.create("learner")

    sql_store.reset()

    assert sql_store.load("learner") is None


def test_sql_store_seeds_default_user(sql_store):
    progress = sql_store.load("test-user")

    assert progress is not None
    assert progress.current_phase == "detail"
    assert progress.phase_progress["concise"].locked is True


def test_sql_store_reset_reseeds_default_user(sql_store):
    sql_store.mutate("test-user", lambda p: setattr(p, "onboarding_completed", True))

    sql_store.reset()

    assert sql_store.load("test-user").onboarding_completed is False


def test_sql_store_creates_database_folder_on_first_use(tmp_path):
    db_file = tmp_path / "nested" / "progress.db"
    store = SqlProgressStore(make_engine(f"sqlite:///{db_file}"), default_user_id="test-user")

    assert not db_file.parent.exists()

    assert store.load("test-user") is not None
    assert db_file.parent.is_dir()


def test_memory_store_load_does_not_insert(memory_store):
    assert memory_store.load("visitor").current_phase == "detail"
    assert "visitor" not in memory_store._records

    memory_store.mutate("visitor", lambda p: setattr(p, "onboarding_completed", True))
    assert "visitor" in memory_store._records
