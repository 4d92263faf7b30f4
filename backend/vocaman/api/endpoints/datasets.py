from typing import List

from fastapi import APIRouter, Depends, status

from vocaman.api.deps import get_current_user
from vocaman.config.dependency_injection import get_dataset_service
from vocaman.schemas.auth import AuthUser
from vocaman.schemas.dataset import (
    ConceptMembership,
    CustomWordCreate,
    CustomWordCreated,
    DatasetCreate,
    DatasetCreated,
    DatasetOut,
    DatasetUpdate,
)
from vocaman.schemas.response import StandardResponse
from vocaman.services.dataset_service import DatasetService

router = APIRouter()


@router.post("", response_model=StandardResponse[DatasetCreated], status_code=status.HTTP_201_CREATED)
def create_dataset(
    dataset_in: DatasetCreate,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    dataset_id = dataset_service.create_dataset(owner_id=current_user.user_id, role=current_user.role, data=dataset_in)
    return StandardResponse(code=201, message="Dataset created", data=DatasetCreated(dataset_id=dataset_id))


@router.get("", response_model=StandardResponse[List[DatasetOut]])
def list_datasets(
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    return StandardResponse(data=dataset_service.list_datasets())


@router.get("/{dataset_id}", response_model=StandardResponse[DatasetOut])
def get_dataset(
    dataset_id: int,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    return StandardResponse(data=dataset_service.get_dataset(dataset_id))


@router.put("/{dataset_id}", response_model=StandardResponse)
def update_dataset(
    dataset_id: int,
    patch: DatasetUpdate,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    dataset_service.update_dataset(owner_id=current_user.user_id, dataset_id=dataset_id, patch=patch)
    return StandardResponse(message="Dataset updated")


@router.delete("/{dataset_id}", response_model=StandardResponse)
def delete_dataset(
    dataset_id: int,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    dataset_service.delete_dataset(owner_id=current_user.user_id, dataset_id=dataset_id)
    return StandardResponse(message="Dataset deleted")


@router.post("/{dataset_id}/concepts", response_model=StandardResponse, status_code=status.HTTP_201_CREATED)
def add_concept_to_dataset(
    dataset_id: int,
    membership: ConceptMembership,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    dataset_service.add_concept(owner_id=current_user.user_id, dataset_id=dataset_id, concept_id=membership.concept_id)
    return StandardResponse(code=201, message="Concept added to dataset")


@router.delete("/{dataset_id}/concepts/{concept_id}", response_model=StandardResponse)
def remove_concept_from_dataset(
    dataset_id: int,
    concept_id: int,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    dataset_service.remove_concept(owner_id=current_user.user_id, dataset_id=dataset_id, concept_id=concept_id)
    return StandardResponse(message="Concept removed from dataset")


@router.post("/{dataset_id}/terms", response_model=StandardResponse[CustomWordCreated], status_code=status.HTTP_201_CREATED)
def add_custom_word(
    dataset_id: int,
    word_in: CustomWordCreate,
    current_user: AuthUser = Depends(get_current_user),
    dataset_service: DatasetService = Depends(get_dataset_service),
):
    """
    向单词集添加自定义单词

    Args:
        dataset_id: 单词集ID
        word_in: 已有概念ID或新图片URL，以及要添加的单词（可附带提示）
        current_user: 当前用户，必须是单词集所有者
        dataset_service: 单词集服务

    Returns:
        StandardResponse[CustomWordCreated]: 单词所属的概念ID
    """
    concept_id = dataset_service.add_custom_word(owner_id=current_user.user_id, dataset_id=dataset_id, word=word_in)
    return StandardResponse(code=201, message="Custom word added", data=CustomWordCreated(concept_id=concept_id))
