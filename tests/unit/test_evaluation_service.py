"""Unit tests for the evaluation store"""

import pytest
from uuid import uuid4

from backend.app.services.evaluation_service import EvaluationService, clamp_score, resolve_criterion
from backend.app.repositories.evaluation_repository import EvaluationRepository
from backend.app.repositories.registration_repository import RegistrationRepository
from backend.app.models.evaluation import Evaluation, EvaluationResult
from backend.app.models.registration import RegistrationStatus
from backend.app.core.exceptions import ValidationException, NotFoundException
from tests.conftest import create_registration


@pytest.fixture
def service(db_session):
    return EvaluationService(EvaluationRepository(db_session), RegistrationRepository(db_session))


@pytest.fixture
async def approved(db_session):
    return await create_registration(db_session, status=RegistrationStatus.APPROVED)


class TestClampScore:
    """Range correction"""

    @pytest.mark.parametrize("field,value,expected", [
        ("leadership", 999, 20),
        ("leadership", -5, 0),
        ("leadership", 12, 12),
        ("priorExperience", 16, 15),
        ("prior_experience", 15, 15),
        ("timeManagement", 20, 20),
        ("attitude", "7", 7),
        ("academics", 10.0, 10),
    ])
    def test_clamps_into_range(self, field, value, expected):
        assert clamp_score(field, value) == expected

    @pytest.mark.parametrize("value", ["abc", None, True, 4.5, [3], ""])
    def test_non_integers_rejected(self, value):
        with pytest.raises(ValidationException):
            clamp_score("leadership", value)

    def test_unknown_criterion(self):
        with pytest.raises(ValidationException) as exc_info:
            resolve_criterion("charisma")
        assert exc_info.value.details["field"] == "charisma"


class TestEvaluationStore:
    """Lazy creation and updates"""

    async def test_created_lazily_with_zero_scores(self, service, approved):
        evaluation, registration = await service.get_or_create(approved.id)

        assert registration.id == approved.id
        assert evaluation.registration_id == approved.id
        assert evaluation.total_score == 0
        assert evaluation.result == EvaluationResult.UNSET

    async def test_get_or_create_is_idempotent(self, service, approved):
        first, _ = await service.get_or_create(approved.id)
        second, _ = await service.get_or_create(approved.id)

        assert first.id == second.id

    @pytest.mark.parametrize("status", [RegistrationStatus.PENDING, RegistrationStatus.REJECTED])
    async def test_not_approved_is_not_found(self, service, db_session, status):
        registration = await create_registration(db_session, status=status)

        with pytest.raises(NotFoundException):
            await service.get_or_create(registration.id)

        assert await EvaluationRepository(db_session).get_by_registration_id(registration.id) is None

    async def test_missing_registration_is_not_found(self, service):
        with pytest.raises(NotFoundException):
            await service.get_or_create(uuid4())

    async def test_becomes_available_once_approved(self, service, db_session):
        registration = await create_registration(db_session)

        with pytest.raises(NotFoundException):
            await service.get_or_create(registration.id)

        await RegistrationRepository(db_session).update_status(registration.id, RegistrationStatus.APPROVED)
        evaluation, _ = await service.get_or_create(registration.id)

        assert evaluation.total_score == 0

    async def test_update_score_clamps(self, service, approved):
        evaluation = await service.update_score(approved.id, "leadership", 999)
        assert evaluation.leadership == 20

        evaluation = await service.update_score(approved.id, "discipline", -3)
        assert evaluation.discipline == 0

    async def test_total_is_sum_of_criteria(self, service, approved):
        await service.update_score(approved.id, "leadership", 20)
        evaluation = await service.update_score(approved.id, "priorExperience", 15)

        assert evaluation.total_score == 35

    async def test_set_result(self, service, approved):
        evaluation = await service.set_result(approved.id, "selected")
        assert evaluation.result == EvaluationResult.SELECTED

        evaluation = await service.set_result(approved.id, "")
        assert evaluation.result == EvaluationResult.UNSET

    async def test_invalid_result_rejected(self, service, approved):
        with pytest.raises(ValidationException):
            await service.set_result(approved.id, "maybe")

    async def test_bad_payload_creates_nothing(self, service, db_session, approved):
        with pytest.raises(ValidationException):
            await service.apply_update(approved.id, {"leadership": 5, "charisma": 3})

        assert await EvaluationRepository(db_session).get_by_registration_id(approved.id) is None

    async def test_apply_update_several_fields(self, service, approved):
        evaluation, _ = await service.apply_update(
            approved.id,
            {"leadership": 18, "time_management": 25, "result": "notSelected"}
        )

        assert evaluation.leadership == 18
        assert evaluation.time_management == 20
        assert evaluation.result == EvaluationResult.NOT_SELECTED
        assert evaluation.total_score == 38

    async def test_empty_payload_rejected(self, service, approved):
        with pytest.raises(ValidationException):
            await service.apply_update(approved.id, {})

    async def test_status_change_keeps_scores(self, service, db_session, approved):
        await service.update_score(approved.id, "academics", 12)

        repo = RegistrationRepository(db_session)
        await repo.update_status(approved.id, RegistrationStatus.REJECTED)
        await repo.update_status(approved.id, RegistrationStatus.APPROVED)

        evaluation, _ = await service.get_or_create(approved.id)
        assert evaluation.academics == 12


class TestConcurrentCreation:
    """Another request inserts the evaluation between our read and our insert"""

    @pytest.fixture
    def lose_insert_race(self, service, test_session_factory):
        """Make the first lookup miss while a second session creates the row"""
        repo = service.evaluation_repo
        original_lookup = repo.get_by_registration_id
        winners = {}
        calls = {"count": 0}

        async def lookup(registration_id):
            calls["count"] += 1
            if calls["count"] == 1:
                async with test_session_factory() as other:
                    winner = Evaluation(registration_id=registration_id)
                    other.add(winner)
                    await other.commit()
                    winners[registration_id] = winner.id
                return None
            return await original_lookup(registration_id)

        repo.get_by_registration_id = lookup
        return winners

    async def test_loser_reuses_winner_row(self, service, approved, lose_insert_race):
        evaluation, registration = await service.get_or_create(approved.id)

        assert evaluation.id == lose_insert_race[approved.id]
        assert registration.uid == approved.uid

    async def test_loser_update_is_applied(self, service, db_session, approved, lose_insert_race):
        evaluation, registration = await service.apply_update(approved.id, {"leadership": 5})

        assert evaluation.id == lose_insert_race[approved.id]
        assert evaluation.leadership == 5
        assert registration.uid == approved.uid

        stored = await EvaluationRepository(db_session).get_by_registration_id(approved.id)
        assert stored.leadership == 5

    async def test_list_after_lost_race(self, service, approved, lose_insert_race):
        rows, total = await service.list_evaluations(page=1, limit=10)

        assert total == 1
        evaluation, registration = rows[0]
        assert evaluation.id == lose_insert_race[approved.id]
        assert registration.uid == approved.uid


class TestListEvaluations:
    """Dashboard listing"""

    async def test_lists_only_approved_and_creates_missing(self, service, db_session):
        await create_registration(db_session, uid="UID-1", email="a@example.com", status=RegistrationStatus.APPROVED)
        await create_registration(db_session, uid="UID-2", email="b@example.com", status=RegistrationStatus.APPROVED)
        await create_registration(db_session, uid="UID-3", email="c@example.com")

        rows, total = await service.list_evaluations(page=1, limit=10)

        assert total == 2
        assert {registration.uid for _, registration in rows} == {"UID-1", "UID-2"}
        assert all(evaluation.total_score == 0 for evaluation, _ in rows)

    async def test_pagination(self, service, db_session):
        for i in range(3):
            await create_registration(
                db_session, uid=f"UID-{i}", email=f"{i}@example.com", status=RegistrationStatus.APPROVED
            )

        rows, total = await service.list_evaluations(page=2, limit=2)

        assert total == 3
        assert len(rows) == 1
