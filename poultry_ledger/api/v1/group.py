from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from starlette.status import HTTP_201_CREATED
from poultry_ledger.common.exceptions import AppError
from poultry_ledger.common.response import SuccessResponse
from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.core.dependencies import get_db, get_ledger_config
from poultry_ledger.models.group import GroupType
from poultry_ledger.services.group_service import (
    add_group,
    delete_group,
    get_group_detail,
    get_groups,
    get_groups_by_type,
    initialize_predefined_groups,
    update_group,
)
from poultry_ledger.services.report_service import ReportService
from poultry_ledger.schemas.group import (
    GroupCreate,
    GroupDetailResponse,
    GroupLedger,
    GroupListResponse,
    GroupResponse,
    GroupSummaryResponse,
    GroupUpdate,
)
from poultry_ledger.logger_config import logger

router = APIRouter()


@router.get("", response_model=GroupListResponse)
def list_groups(
    type: Optional[GroupType] = Query(None),
    db: Session = Depends(get_db)
):
    """ Get all active groups, optionally of one type """
    groups, ledger_counts = get_groups(db, type)
    items = [
        GroupResponse.model_validate(group).model_copy(update={"ledger_count": ledger_counts.get(group.id, 0)})
        for group in groups
    ]
    return GroupListResponse(total=len(items), groups=items)


@router.get("/type/{group_type}", response_model=GroupListResponse)
def list_groups_by_type(
    group_type: GroupType,
    db: Session = Depends(get_db)
):
    groups = get_groups_by_type(db, group_type)
    return GroupListResponse(
        total=len(groups),
        groups=[GroupResponse.model_validate(group) for group in groups]
    )


@router.post("/initialize")
def initialize_groups_route(db: Session = Depends(get_db)):
    """
    Create the predefined chart of accounts.
    Existing predefined groups are left alone.
    """
    try:
        created = initialize_predefined_groups(db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return SuccessResponse.send(
        data={"created": len(created)},
        message="Predefined groups initialized"
    )


@router.get("/{group_id}", response_model=GroupDetailResponse)
def get_group(
    group_id: str,
    db: Session = Depends(get_db)
):
    """
    Get group by id with its child groups and ledgers
    """
    group, children, ledgers = get_group_detail(db, group_id)
    return GroupDetailResponse(
        **GroupResponse.model_validate(group).model_dump(exclude={"ledger_count"}),
        ledger_count=len(ledgers),
        child_groups=[GroupResponse.model_validate(child) for child in children],
        ledgers=[GroupLedger.model_validate(ledger) for ledger in ledgers],
    )


@router.get("/{group_id}/summary", response_model=GroupSummaryResponse)
def get_group_summary(
    group_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
):
    """ Trial balance of the group's direct sub-groups and accounts """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )
    return ReportService(db, config).group_summary(group_id, start_date, end_date)


@router.post("", response_model=GroupResponse, status_code=HTTP_201_CREATED)
def create_group_route(
    group_data: GroupCreate,
    db: Session = Depends(get_db)
):
    """
    Create Group
    """
    try:
        group = add_group(
            db=db,
            name=group_data.name,
            type=group_data.type,
            parent_id=group_data.parent_id,
            includes_all_vendors=group_data.includes_all_vendors,
        )
        return GroupResponse.model_validate(group)

    except AppError:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating group: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create group"
        )


@router.put("/{group_id}", response_model=GroupResponse)
def update_group_route(
    group_id: str,
    group_data: GroupUpdate,
    db: Session = Depends(get_db)
):
    """
    Update group. Sending parent_id as null moves the group to the top level.
    """
    changes = group_data.model_dump(exclude_unset=True)
    try:
        group = update_group(db, group_id, **changes)
        return GroupResponse.model_validate(group)

    except AppError:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error updating group: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update group"
        )


@router.delete("/{group_id}")
def delete_group_route(
    group_id: str,
    db: Session = Depends(get_db)
):
    try:
        group = delete_group(db, group_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return SuccessResponse.send(data={"id": group.id}, message="Group deleted successfully")
