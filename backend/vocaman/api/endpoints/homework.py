from typing import List

from fastapi import APIRouter, Depends, status

from vocaman.api.deps import get_current_user, require_role
from vocaman.config.dependency_injection import get_homework_service
from vocaman.schemas.auth import AuthUser
from vocaman.schemas.homework import (
    AssignmentCreate,
    AssignmentCreated,
    AssignmentOut,
    AssignmentPatch,
    ProgressRecordOut,
    ProgressSubmit,
    ProgressSubmitted,
)
from vocaman.schemas.response import StandardResponse
from vocaman.services.homework_service import HomeworkService

router = APIRouter()


@router.post("/assignments", response_model=StandardResponse[AssignmentCreated], status_code=status.HTTP_201_CREATED)
def assign_homework(
    assignment_in: AssignmentCreate,
    current_user: AuthUser = Depends(get_current_user),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    """
    家长给孩子布置作业

    Args:
        assignment_in: 孩子ID、单词集ID和奖励积分
        current_user: 当前用户（家长）
        homework_service: 作业服务

    Returns:
        StandardResponse[AssignmentCreated]: 新作业ID
    """
    assignment_id = homework_service.assign_homework(
        parent_id=current_user.user_id,
        child_id=assignment_in.child_user_id,
        dataset_id=assignment_in.dataset_id,
        reward=assignment_in.reward,
    )
    return StandardResponse(code=201, message="Homework assigned", data=AssignmentCreated(assignment_id=assignment_id))


@router.get("/assignments/assigned_to_me", response_model=StandardResponse[List[AssignmentOut]])
def list_assigned_to_me(
    current_user: AuthUser = Depends(require_role("student")),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    return StandardResponse(data=homework_service.list_assigned_to(current_user.user_id))


@router.get("/assignments/created_by_me", response_model=StandardResponse[List[AssignmentOut]])
def list_created_by_me(
    current_user: AuthUser = Depends(require_role("parent")),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    return StandardResponse(data=homework_service.list_created_by(current_user.user_id))


@router.get("/assignments/{assignment_id}", response_model=StandardResponse[AssignmentOut])
def get_assignment(
    assignment_id: int,
    current_user: AuthUser = Depends(get_current_user),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    details = homework_service.get_assignment_details(user_id=current_user.user_id, assignment_id=assignment_id)
    return StandardResponse(data=details)


@router.put("/assignments/{assignment_id}", response_model=StandardResponse)
def update_assignment(
    assignment_id: int,
    patch: AssignmentPatch,
    current_user: AuthUser = Depends(get_current_user),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    homework_service.update_assignment(parent_id=current_user.user_id, assignment_id=assignment_id, patch=patch)
    return StandardResponse(message="Homework updated")


@router.delete("/assignments/{assignment_id}", response_model=StandardResponse)
def delete_assignment(
    assignment_id: int,
    current_user: AuthUser = Depends(get_current_user),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    homework_service.delete_assignment(parent_id=current_user.user_id, assignment_id=assignment_id)
    return StandardResponse(message="Homework deleted")


@router.get("/assignments/{assignment_id}/progress", response_model=StandardResponse[List[ProgressRecordOut]])
def get_assignment_progress(
    assignment_id: int,
    current_user: AuthUser = Depends(get_current_user),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    records = homework_service.get_progress(parent_id=current_user.user_id, assignment_id=assignment_id)
    return StandardResponse(data=records)


@router.post("/progress", response_model=StandardResponse[ProgressSubmitted])
def submit_progress(
    progress_in: ProgressSubmit,
    current_user: AuthUser = Depends(get_current_user),
    homework_service: HomeworkService = Depends(get_homework_service),
):
    """
    孩子提交一个单词的作答结果

    Returns:
        StandardResponse[ProgressSubmitted]: rewardEarned 为本次提交发放的积分
    """
    result = homework_service.submit_progress(
        child_id=current_user.user_id,
        assignment_id=progress_in.assignment_id,
        term_id=progress_in.term_id,
        outcome=progress_in.status,
    )
    return StandardResponse(message="Progress recorded", data=result)
