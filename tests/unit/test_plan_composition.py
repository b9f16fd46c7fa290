"""
Unit tests for PlanCompositionService and the creation saga.

Uses the in-memory fakes with failure injection to exercise the
compensation paths.
"""

import pytest

from application.exceptions import (
    CompensationError,
    ExerciseNotFoundError,
    PlanAccessDeniedError,
    PlanLimitExceededError,
    PlanNotFoundError,
    PlanPersistenceError,
    PlanSetAccessDeniedError,
    PlanSetNotFoundError,
)
from models.plan import (
    CreatePlanRequest,
    CreatePlanSetRequest,
    UpdatePlanRequest,
    UpdatePlanSetRequest,
)
from services.plan_composition import (
    CreationStage,
    PlanCompositionService,
    PlanCreationSaga,
)
from tests.conftest import OTHER_USER_ID, TEST_USER_ID


@pytest.fixture
def service(fake_plan_repo, fake_exercise_repo):
    return PlanCompositionService(fake_plan_repo, fake_exercise_repo)


@pytest.fixture
def create_request(sample_plan_command):
    return CreatePlanRequest(**sample_plan_command)


@pytest.fixture
def existing_plan(service, create_request):
    return service.create_plan(TEST_USER_ID, create_request)


def _seed_active_plans(repo, count, user_id=TEST_USER_ID):
    repo.seed(
        [{"id": f"plan-{i}", "user_id": user_id, "name": f"Plan {i}"} for i in range(count)]
    )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestCreatePlan:
    """Tests for plan creation."""

    def test_happy_path(self, service, fake_plan_repo, create_request):
        plan = service.create_plan(TEST_USER_ID, create_request)

        assert plan["user_id"] == TEST_USER_ID
        assert plan["name"] == "Push Pull Legs"

        memberships = fake_plan_repo.get_memberships(plan["id"])
        assert [(m["exercise_id"], m["order_index"]) for m in memberships] == [
            ("E1", 0),
            ("E2", 1),
            ("E3", 2),
        ]
        sets = fake_plan_repo.get_sets(plan["id"])
        assert len(sets) == 3
        assert all(
            (s["repetitions"], s["weight"], s["set_order"]) == (1, 2.5, 0) for s in sets
        )

    def test_set_order_defaults_to_position(self, service, fake_plan_repo):
        request = CreatePlanRequest(
            name="Legs",
            exercises=[
                {
                    "exerciseId": "E1",
                    "sets": [
                        {"repetitions": 5, "weight": 100},
                        {"repetitions": 5, "weight": 110},
                        {"repetitions": 5, "weight": 120, "set_order": 7},
                    ],
                }
            ],
        )

        plan = service.create_plan(TEST_USER_ID, request)

        orders = sorted(s["set_order"] for s in fake_plan_repo.get_sets(plan["id"]))
        assert orders == [0, 1, 7]

    def test_plan_limit(self, service, fake_plan_repo, create_request):
        _seed_active_plans(fake_plan_repo, 7)

        with pytest.raises(PlanLimitExceededError) as exc_info:
            service.create_plan(TEST_USER_ID, create_request)

        assert exc_info.value.limit == 7
        assert len(fake_plan_repo.get_all()) == 7
        assert fake_plan_repo.all_memberships() == []

    def test_soft_deleted_plans_do_not_count(self, service, fake_plan_repo, create_request):
        _seed_active_plans(fake_plan_repo, 7)
        fake_plan_repo.update("plan-0", {"deleted_at": "2026-01-01T00:00:00+00:00"})

        plan = service.create_plan(TEST_USER_ID, create_request)

        assert plan["id"]

    def test_other_users_plans_do_not_count(self, service, fake_plan_repo, create_request):
        _seed_active_plans(fake_plan_repo, 7, user_id=OTHER_USER_ID)
        assert service.create_plan(TEST_USER_ID, create_request)

    def test_unknown_exercise_writes_nothing(self, service, fake_plan_repo, sample_plan_command):
        sample_plan_command["exercises"][1]["exerciseId"] = "E99"

        with pytest.raises(ExerciseNotFoundError) as exc_info:
            service.create_plan(TEST_USER_ID, CreatePlanRequest(**sample_plan_command))

        assert exc_info.value.missing_ids == ["E99"]
        assert fake_plan_repo.get_all() == []
        assert fake_plan_repo.all_memberships() == []
        assert fake_plan_repo.all_sets() == []

    def test_membership_failure_rolls_back(self, service, fake_plan_repo, create_request):
        fake_plan_repo.fail_on("insert_memberships")

        with pytest.raises(PlanPersistenceError):
            service.create_plan(TEST_USER_ID, create_request)

        assert fake_plan_repo.get_all() == []
        assert len(fake_plan_repo.delete_calls) == 1

    def test_set_failure_rolls_back_with_cascade(self, service, fake_plan_repo, create_request):
        fake_plan_repo.fail_on("insert_sets")

        with pytest.raises(PlanPersistenceError):
            service.create_plan(TEST_USER_ID, create_request)

        assert fake_plan_repo.get_all() == []
        assert fake_plan_repo.all_memberships() == []
        assert fake_plan_repo.all_sets() == []

    def test_header_failure_needs_no_rollback(self, service, fake_plan_repo, create_request):
        fake_plan_repo.fail_on("create", RuntimeError("connection reset"))

        with pytest.raises(PlanPersistenceError):
            service.create_plan(TEST_USER_ID, create_request)

        assert fake_plan_repo.delete_calls == []

    def test_failed_compensation_is_fatal(self, service, fake_plan_repo, create_request, caplog):
        fake_plan_repo.fail_on("insert_sets")
        fake_plan_repo.fail_on("delete")

        with pytest.raises(CompensationError) as exc_info:
            service.create_plan(TEST_USER_ID, create_request)

        assert exc_info.value.plan_id
        assert any(r.levelname == "CRITICAL" for r in caplog.records)


@pytest.mark.unit
class TestPlanCreationSaga:
    """Tests for saga stages and idempotent rollback."""

    def test_stages_reach_committed(self, fake_plan_repo, create_request):
        saga = PlanCreationSaga(fake_plan_repo, TEST_USER_ID, create_request)
        assert saga.stage == CreationStage.PENDING

        saga.run()

        assert saga.stage == CreationStage.COMMITTED

    def test_rollback_is_idempotent(self, fake_plan_repo, create_request):
        fake_plan_repo.fail_on("insert_sets")
        saga = PlanCreationSaga(fake_plan_repo, TEST_USER_ID, create_request)

        with pytest.raises(PlanPersistenceError):
            saga.run()
        saga.rollback()

        assert saga.stage == CreationStage.ROLLED_BACK
        assert len(fake_plan_repo.delete_calls) == 1

    def test_rollback_before_header_is_noop(self, fake_plan_repo, create_request):
        saga = PlanCreationSaga(fake_plan_repo, TEST_USER_ID, create_request)
        saga.rollback()
        assert fake_plan_repo.delete_calls == []

    def test_committed_plan_is_not_rolled_back(self, fake_plan_repo, create_request):
        saga = PlanCreationSaga(fake_plan_repo, TEST_USER_ID, create_request)
        saga.run()

        saga.rollback()

        assert fake_plan_repo.delete_calls == []
        assert len(fake_plan_repo.get_all()) == 1


# ---------------------------------------------------------------------------
# Read / ownership
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestGetPlan:
    def test_detail_orders_exercises_by_membership(self, service, fake_plan_repo, sample_plan_command):
        sample_plan_command["exercises"].reverse()
        plan = service.create_plan(TEST_USER_ID, CreatePlanRequest(**sample_plan_command))

        detail = service.get_plan(plan["id"], TEST_USER_ID)

        assert [e["id"] for e in detail["exercises"]] == ["E3", "E2", "E1"]
        assert len(detail["sets"]) == 3
        assert detail["name"] == "Push Pull Legs"

    def test_missing_plan(self, service):
        with pytest.raises(PlanNotFoundError):
            service.get_plan("missing", TEST_USER_ID)

    def test_other_users_plan(self, service, existing_plan):
        with pytest.raises(PlanAccessDeniedError):
            service.get_plan(existing_plan["id"], OTHER_USER_ID)

    def test_list_excludes_soft_deleted(self, service, existing_plan):
        service.delete_plan(existing_plan["id"], TEST_USER_ID)
        assert service.list_plans(TEST_USER_ID) == []


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestUpdatePlan:
    """Tests for replace and basics updates."""

    def test_full_replace(self, service, fake_plan_repo, existing_plan):
        request = UpdatePlanRequest(
            name="Renamed",
            exercises=[
                {"exerciseId": "E4", "sets": [{"repetitions": 8, "weight": 30}]},
                {"exerciseId": "E1", "sets": [{"repetitions": 5, "weight": 100}]},
            ],
        )

        updated = service.update_plan(existing_plan["id"], TEST_USER_ID, request)

        assert updated["name"] == "Renamed"
        assert updated["updated_at"] >= existing_plan["updated_at"]
        memberships = fake_plan_repo.get_memberships(existing_plan["id"])
        assert [(m["exercise_id"], m["order_index"]) for m in memberships] == [("E4", 0), ("E1", 1)]
        sets = fake_plan_repo.get_sets(existing_plan["id"])
        assert {s["exercise_id"] for s in sets} == {"E4", "E1"}

    def test_membership_only_replace_keeps_sets(self, service, fake_plan_repo, existing_plan):
        before = fake_plan_repo.get_sets(existing_plan["id"])

        service.update_plan(
            existing_plan["id"], TEST_USER_ID, UpdatePlanRequest(exerciseIds=["E2", "E1"])
        )

        memberships = fake_plan_repo.get_memberships(existing_plan["id"])
        assert [m["exercise_id"] for m in memberships] == ["E2", "E1"]
        assert fake_plan_repo.get_sets(existing_plan["id"]) == before

    def test_basics_only(self, service, fake_plan_repo, existing_plan):
        service.update_plan(
            existing_plan["id"], TEST_USER_ID, UpdatePlanRequest(description="")
        )

        plan = fake_plan_repo.get_by_id(existing_plan["id"])
        assert plan["description"] is None
        assert plan["name"] == "Push Pull Legs"
        assert len(fake_plan_repo.get_memberships(existing_plan["id"])) == 3

    def test_replace_with_unknown_exercise(self, service, fake_plan_repo, existing_plan):
        with pytest.raises(ExerciseNotFoundError):
            service.update_plan(
                existing_plan["id"],
                TEST_USER_ID,
                UpdatePlanRequest(exercises=[{"exerciseId": "E99", "sets": []}]),
            )
        assert len(fake_plan_repo.get_memberships(existing_plan["id"])) == 3

    def test_replace_is_not_compensated(self, service, fake_plan_repo, existing_plan):
        """A failure mid-replace leaves the new memberships without sets."""
        fake_plan_repo.fail_on("insert_sets")

        with pytest.raises(PlanPersistenceError):
            service.update_plan(
                existing_plan["id"],
                TEST_USER_ID,
                UpdatePlanRequest(
                    exercises=[{"exerciseId": "E4", "sets": [{"repetitions": 8, "weight": 30}]}]
                ),
            )

        assert [m["exercise_id"] for m in fake_plan_repo.get_memberships(existing_plan["id"])] == ["E4"]
        assert fake_plan_repo.get_sets(existing_plan["id"]) == []
        assert fake_plan_repo.delete_calls == []

    def test_update_other_users_plan(self, service, existing_plan):
        with pytest.raises(PlanAccessDeniedError):
            service.update_plan(
                existing_plan["id"], OTHER_USER_ID, UpdatePlanRequest(name="Hijacked")
            )


@pytest.mark.unit
class TestDeletePlan:
    def test_soft_delete_keeps_children(self, service, fake_plan_repo, existing_plan):
        service.delete_plan(existing_plan["id"], TEST_USER_ID)

        plan = fake_plan_repo.get_by_id(existing_plan["id"])
        assert plan["deleted_at"] is not None
        assert len(fake_plan_repo.get_memberships(existing_plan["id"])) == 3
        assert len(fake_plan_repo.get_sets(existing_plan["id"])) == 3

    def test_delete_missing_plan(self, service):
        with pytest.raises(PlanNotFoundError):
            service.delete_plan("missing", TEST_USER_ID)


# ---------------------------------------------------------------------------
# Individual sets
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestPlanSets:
    """Tests for per-set create, update and delete."""

    def test_create_set_appends_after_max_order(self, service, existing_plan):
        plan_set = service.create_plan_set(
            existing_plan["id"],
            TEST_USER_ID,
            CreatePlanSetRequest(exerciseId="E1", repetitions=6, weight=80),
        )
        assert plan_set["set_order"] == 1

    def test_create_first_set_for_exercise(self, service, existing_plan):
        plan_set = service.create_plan_set(
            existing_plan["id"],
            TEST_USER_ID,
            CreatePlanSetRequest(exerciseId="E4", repetitions=6, weight=80),
        )
        assert plan_set["set_order"] == 0

    def test_create_set_with_explicit_order(self, service, existing_plan):
        plan_set = service.create_plan_set(
            existing_plan["id"],
            TEST_USER_ID,
            CreatePlanSetRequest(exerciseId="E1", repetitions=6, weight=80, set_order=5),
        )
        assert plan_set["set_order"] == 5

    def test_create_set_unknown_exercise(self, service, existing_plan):
        with pytest.raises(ExerciseNotFoundError):
            service.create_plan_set(
                existing_plan["id"],
                TEST_USER_ID,
                CreatePlanSetRequest(exerciseId="E99", repetitions=6, weight=80),
            )

    def test_update_set(self, service, fake_plan_repo, existing_plan):
        set_id = fake_plan_repo.get_sets(existing_plan["id"])[0]["id"]

        updated = service.update_plan_set(
            existing_plan["id"], set_id, TEST_USER_ID, UpdatePlanSetRequest(weight=20)
        )

        assert updated["weight"] == 20
        assert updated["repetitions"] == 1

    def test_update_missing_set(self, service, existing_plan):
        with pytest.raises(PlanSetNotFoundError):
            service.update_plan_set(
                existing_plan["id"], "missing", TEST_USER_ID, UpdatePlanSetRequest(weight=20)
            )

    def test_set_from_another_plan(self, service, fake_plan_repo, existing_plan, create_request):
        other_plan = service.create_plan(TEST_USER_ID, create_request)
        foreign_set_id = fake_plan_repo.get_sets(other_plan["id"])[0]["id"]

        with pytest.raises(PlanSetAccessDeniedError):
            service.delete_plan_set(existing_plan["id"], foreign_set_id, TEST_USER_ID)

    def test_delete_set(self, service, fake_plan_repo, existing_plan):
        set_id = fake_plan_repo.get_sets(existing_plan["id"])[0]["id"]

        service.delete_plan_set(existing_plan["id"], set_id, TEST_USER_ID)

        assert fake_plan_repo.get_set(set_id) is None
