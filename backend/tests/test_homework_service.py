"""
作业生命周期服务测试

覆盖状态迁移、进度覆盖写入、完成判定和奖励只发放一次。
"""
import threading
from unittest.mock import MagicMock

import pytest

from vocaman.core.exceptions import (
    AlreadyCompleted,
    AssignmentCancelled,
    AssignmentNotFound,
    DatasetNotFound,
    Forbidden,
    NoFieldsProvided,
    RelationNotApproved,
    TermNotFound,
)
from vocaman.crud.crud_homework import assignment as crud_assignment
from vocaman.crud.crud_homework import homework_progress as crud_progress
from vocaman.db.database import SessionLocal, transaction
from vocaman.schemas.homework import AssignmentPatch, AssignmentStatus, ProgressOutcome
from vocaman.services.homework_service import HomeworkService, is_complete


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def service(db, notifier):
    return HomeworkService(db, notifier=notifier)


@pytest.fixture
def family(make_user, make_relation):
    parent = make_user("parent", nickname="Mom")
    child = make_user("student", nickname="Kid")
    make_relation(parent, child)
    return parent, child


def _assign(service, parent, child, dataset, reward=10):
    return service.assign_homework(parent_id=parent.id, child_id=child.id, dataset_id=dataset.id, reward=reward)


def _submit(service, child, assignment_id, term_id, outcome=ProgressOutcome.CORRECT):
    return service.submit_progress(child_id=child.id, assignment_id=assignment_id, term_id=term_id, outcome=outcome)


def test_is_complete_predicate():
    assert is_complete(3, 3) is True
    assert is_complete(3, 2) is False
    assert is_complete(0, 0) is False


def test_assign_homework_creates_assigned_assignment(db, service, family, make_dataset, notifier):
    parent, child = family
    dataset, _ = make_dataset(parent)

    assignment_id = _assign(service, parent, child, dataset, reward=15)

    created = crud_assignment.get(db, assignment_id)
    assert created.status == AssignmentStatus.ASSIGNED.value
    assert created.reward == 15
    assert created.reward_disbursed_at is None
    notifier.dispatch.assert_called_once()
    assert notifier.dispatch.call_args.kwargs["recipient_user_id"] == child.id
    assert notifier.dispatch.call_args.kwargs["type"] == "homework_assigned"


def test_assign_homework_requires_approved_relation(service, make_user, make_relation, make_dataset):
    parent = make_user("parent")
    stranger = make_user("student")
    pending_child = make_user("student")
    make_relation(parent, pending_child, status="pending")
    dataset, _ = make_dataset(parent)

    with pytest.raises(RelationNotApproved):
        _assign(service, parent, stranger, dataset)
    with pytest.raises(RelationNotApproved):
        _assign(service, parent, pending_child, dataset)


def test_assign_homework_unknown_dataset(service, family):
    parent, child = family
    with pytest.raises(DatasetNotFound):
        service.assign_homework(parent_id=parent.id, child_id=child.id, dataset_id=9999)


def test_progress_drives_state_and_reward_once(db, service, family, make_dataset, notifier):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1, 1])
    assignment_id = _assign(service, parent, child, dataset, reward=10)

    first = _submit(service, child, assignment_id, term_ids[0])
    assert first.accepted is True
    assert first.reward_earned == 0
    assert crud_assignment.get(db, assignment_id).status == AssignmentStatus.IN_PROGRESS.value

    assert _submit(service, child, assignment_id, term_ids[1]).reward_earned == 0
    db.refresh(child)
    assert child.mileage == 0

    last = _submit(service, child, assignment_id, term_ids[2])
    assert last.reward_earned == 10

    completed = crud_assignment.get(db, assignment_id)
    assert completed.status == AssignmentStatus.COMPLETED.value
    assert completed.reward_disbursed_at is not None
    db.refresh(child)
    assert child.mileage == 10
    assert notifier.dispatch.call_args.kwargs["type"] == "homework_completed"


def test_incorrect_then_correct_overwrites_single_record(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1])
    assignment_id = _assign(service, parent, child, dataset)

    _submit(service, child, assignment_id, term_ids[0], ProgressOutcome.INCORRECT)
    _submit(service, child, assignment_id, term_ids[0], ProgressOutcome.CORRECT)

    records = crud_progress.list_with_terms(db, assignment_id=assignment_id)
    assert len(records) == 1
    assert records[0].status == "correct"


def test_resubmitting_same_correct_term_is_idempotent(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1])
    assignment_id = _assign(service, parent, child, dataset)

    _submit(service, child, assignment_id, term_ids[0])
    _submit(service, child, assignment_id, term_ids[0])

    assert crud_progress.count_correct(db, assignment_id=assignment_id) == 1
    assert crud_assignment.get(db, assignment_id).status == AssignmentStatus.IN_PROGRESS.value


def test_later_incorrect_answer_replaces_correct_one(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1])
    assignment_id = _assign(service, parent, child, dataset)

    _submit(service, child, assignment_id, term_ids[0], ProgressOutcome.CORRECT)
    _submit(service, child, assignment_id, term_ids[0], ProgressOutcome.INCORRECT)

    assert crud_progress.count_correct(db, assignment_id=assignment_id) == 0


def test_submit_after_completion_is_rejected(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset, reward=5)
    assert _submit(service, child, assignment_id, term_ids[0]).reward_earned == 5

    with pytest.raises(AlreadyCompleted):
        _submit(service, child, assignment_id, term_ids[0])

    db.refresh(child)
    assert child.mileage == 5


def test_terms_shared_between_concepts_count_once(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [2, 1])
    assignment_id = _assign(service, parent, child, dataset)

    _submit(service, child, assignment_id, term_ids[0])
    _submit(service, child, assignment_id, term_ids[1])
    assert crud_assignment.get(db, assignment_id).status == AssignmentStatus.IN_PROGRESS.value

    _submit(service, child, assignment_id, term_ids[2])
    assert crud_assignment.get(db, assignment_id).status == AssignmentStatus.COMPLETED.value


def test_empty_dataset_never_completes(db, service, family, make_dataset, make_user):
    parent, child = family
    dataset, _ = make_dataset(parent, [])
    other_dataset, other_terms = make_dataset(parent, [1], name="Other")
    assignment_id = _assign(service, parent, child, dataset)

    with pytest.raises(TermNotFound):
        _submit(service, child, assignment_id, other_terms[0])

    assignment = crud_assignment.get(db, assignment_id)
    assert assignment.status == AssignmentStatus.ASSIGNED.value
    assert assignment.reward_disbursed_at is None


def test_submit_for_unknown_assignment(service, family):
    _, child = family
    with pytest.raises(AssignmentNotFound):
        service.submit_progress(child_id=child.id, assignment_id=424242, term_id=1, outcome="correct")


def test_submit_by_other_child_is_forbidden(db, service, family, make_dataset, make_user):
    parent, child = family
    intruder = make_user("student")
    dataset, term_ids = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset)

    with pytest.raises(Forbidden):
        _submit(service, intruder, assignment_id, term_ids[0])
    assert crud_progress.count_correct(db, assignment_id=assignment_id) == 0


def test_submit_to_cancelled_assignment(service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset)
    service.update_assignment(
        parent_id=parent.id,
        assignment_id=assignment_id,
        patch=AssignmentPatch(status=AssignmentStatus.CANCELLED),
    )

    with pytest.raises(AssignmentCancelled):
        _submit(service, child, assignment_id, term_ids[0])


def test_reopened_assignment_does_not_pay_twice(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset, reward=20)
    assert _submit(service, child, assignment_id, term_ids[0]).reward_earned == 20

    # 家长手动把作业改回进行中，孩子再次完成
    service.update_assignment(
        parent_id=parent.id,
        assignment_id=assignment_id,
        patch=AssignmentPatch(status=AssignmentStatus.IN_PROGRESS),
    )
    again = _submit(service, child, assignment_id, term_ids[0])

    assert again.reward_earned == 0
    assert crud_assignment.get(db, assignment_id).status == AssignmentStatus.COMPLETED.value
    db.refresh(child)
    assert child.mileage == 20


def test_settle_completion_twice_credits_once(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset, reward=7)
    _submit(service, child, assignment_id, term_ids[0])
    with transaction(db):
        assignment = crud_assignment.get_for_update(db, assignment_id)
        assert service.settle_completion(assignment) == 0

    db.refresh(child)
    assert child.mileage == 7


def test_zero_reward_completion_marks_disbursed(db, service, family, make_dataset, notifier):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset, reward=0)
    notifier.reset_mock()

    assert _submit(service, child, assignment_id, term_ids[0]).reward_earned == 0

    completed = crud_assignment.get(db, assignment_id)
    assert completed.status == AssignmentStatus.COMPLETED.value
    assert completed.reward_disbursed_at is not None
    notifier.dispatch.assert_not_called()


def test_manual_completion_does_not_pay(db, service, family, make_dataset):
    parent, child = family
    dataset, _ = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset, reward=30)

    service.update_assignment(
        parent_id=parent.id,
        assignment_id=assignment_id,
        patch=AssignmentPatch(status=AssignmentStatus.COMPLETED),
    )

    db.refresh(child)
    assert child.mileage == 0
    assert crud_assignment.get(db, assignment_id).reward_disbursed_at is None


def test_update_assignment_validation(service, family, make_dataset, make_user):
    parent, child = family
    dataset, _ = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset)

    with pytest.raises(NoFieldsProvided):
        service.update_assignment(parent_id=parent.id, assignment_id=assignment_id, patch=AssignmentPatch())
    with pytest.raises(Forbidden):
        service.update_assignment(parent_id=child.id, assignment_id=assignment_id, patch=AssignmentPatch(reward=1))
    with pytest.raises(AssignmentNotFound):
        service.update_assignment(parent_id=parent.id, assignment_id=9999, patch=AssignmentPatch(reward=1))


def test_update_assignment_changes_reward(db, service, family, make_dataset):
    parent, child = family
    dataset, _ = make_dataset(parent, [1])
    assignment_id = _assign(service, parent, child, dataset, reward=5)

    service.update_assignment(parent_id=parent.id, assignment_id=assignment_id, patch=AssignmentPatch(reward=50))

    db.expire_all()
    assert crud_assignment.get(db, assignment_id).reward == 50


def test_delete_assignment_removes_progress(db, service, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1, 1, 1])
    assignment_id = _assign(service, parent, child, dataset)
    for term_id in term_ids[:3]:
        _submit(service, child, assignment_id, term_id)
    assert len(crud_progress.list_with_terms(db, assignment_id=assignment_id)) == 3

    with pytest.raises(Forbidden):
        service.delete_assignment(parent_id=child.id, assignment_id=assignment_id)

    service.delete_assignment(parent_id=parent.id, assignment_id=assignment_id)

    assert crud_assignment.get(db, assignment_id) is None
    assert crud_progress.list_with_terms(db, assignment_id=assignment_id) == []
    with pytest.raises(AssignmentNotFound):
        service.get_assignment_details(user_id=parent.id, assignment_id=assignment_id)


def test_assignment_visibility(service, family, make_dataset, make_user):
    parent, child = family
    outsider = make_user("parent")
    dataset, term_ids = make_dataset(parent, [1, 1])
    assignment_id = _assign(service, parent, child, dataset)
    _submit(service, child, assignment_id, term_ids[0], ProgressOutcome.INCORRECT)

    details = service.get_assignment_details(user_id=child.id, assignment_id=assignment_id)
    assert details.dataset_name == "Animals"
    assert details.parent_nickname == "Mom"
    assert details.source_language_code == "ko"

    with pytest.raises(Forbidden):
        service.get_assignment_details(user_id=outsider.id, assignment_id=assignment_id)
    with pytest.raises(Forbidden):
        service.get_progress(parent_id=child.id, assignment_id=assignment_id)

    progress = service.get_progress(parent_id=parent.id, assignment_id=assignment_id)
    assert [p.status.value for p in progress] == ["incorrect"]

    assert [a.assignment_id for a in service.list_assigned_to(child.id)] == [assignment_id]
    assert [a.child_nickname for a in service.list_created_by(parent.id)] == ["Kid"]


def test_concurrent_final_submissions_credit_once(db, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1])
    setup = HomeworkService(db)
    assignment_id = _assign(setup, parent, child, dataset, reward=50)
    _submit(setup, child, assignment_id, term_ids[0])

    barrier = threading.Barrier(2)
    outcomes = []

    def finish():
        session = SessionLocal()
        try:
            barrier.wait()
            result = _submit(HomeworkService(session), child, assignment_id, term_ids[1])
            outcomes.append(result.reward_earned)
        except AlreadyCompleted:
            outcomes.append("already_completed")
        finally:
            session.close()

    workers = [threading.Thread(target=finish) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=30)

    assert len(outcomes) == 2
    assert 50 in outcomes
    assert "already_completed" in outcomes
    db.refresh(child)
    assert child.mileage == 50


def test_concurrent_identical_submissions_keep_one_record(db, family, make_dataset):
    parent, child = family
    dataset, term_ids = make_dataset(parent, [1, 1])
    assignment_id = _assign(HomeworkService(db), parent, child, dataset, reward=50)

    barrier = threading.Barrier(2)
    results = []
    errors = []

    def submit_same_term():
        session = SessionLocal()
        try:
            barrier.wait()
            results.append(_submit(HomeworkService(session), child, assignment_id, term_ids[0]))
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    workers = [threading.Thread(target=submit_same_term) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=30)

    assert errors == []
    assert [r.accepted for r in results] == [True, True]
    records = crud_progress.list_with_terms(db, assignment_id=assignment_id)
    assert len(records) == 1
    assert records[0].term_id == term_ids[0]
    assert records[0].status == "correct"
    assert crud_assignment.get(db, assignment_id).status == AssignmentStatus.IN_PROGRESS.value
    db.refresh(child)
    assert child.mileage == 0
