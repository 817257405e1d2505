"""
Progress endpoints for tutorial step tracking.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db, verify_token
from common.schemas import (
    APIResponse,
    ProgressAdvanceData,
    ProgressAdvanceRequest,
    ToolProgressData,
)
from modules import achievement_service, progress_service
from modules.achievement_service import AchievementType
from modules.errors import InvalidArgumentError, StorageConflictError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/progress",
    response_model=APIResponse,
    tags=["Progress"]
)
async def advance_progress(
    request: ProgressAdvanceRequest,
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Mark a tutorial step as done and unlock step achievements.

    Args:
        request: Tool, step index and sequence length

    Returns:
        APIResponse: Updated progress and newly unlocked achievements
    """
    try:
        outcome = progress_service.advance_progress(
            db,
            user_id,
            request.tool_id,
            request.tool_name,
            request.step_index,
            request.total_steps
        )

        triggered = []
        if request.step_index == 0:
            triggered.append(AchievementType.FIRST_STEP)
        if outcome.completed_now:
            triggered.append(AchievementType.TOOL_COMPLETION)

        awarded = []
        for achievement_type in triggered:
            award = achievement_service.award_builtin(
                db,
                user_id,
                achievement_type,
                tool_id=request.tool_id,
                tool_name=outcome.progress.tool_name
            )
            if award.created:
                awarded.append(achievement_type.value)

        return APIResponse(
            success=True,
            data=ProgressAdvanceData(
                progress=ToolProgressData.model_validate(outcome.progress),
                achievements_awarded=awarded
            ).model_dump()
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to advance progress for {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get(
    "/progress",
    response_model=APIResponse,
    tags=["Progress"]
)
async def list_progress(
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    List the caller's progress, most recent activity first.

    Returns:
        APIResponse: Progress records
    """
    try:
        records = progress_service.get_user_progress(db, user_id)
        return APIResponse(
            success=True,
            data=[
                ToolProgressData.model_validate(record).model_dump()
                for record in records
            ]
        )
    except Exception as e:
        logger.error(f"Failed to fetch progress for {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get(
    "/progress/{tool_id}",
    response_model=APIResponse,
    tags=["Progress"]
)
async def get_tool_progress(
    tool_id: str,
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get the caller's progress for one tool.

    Args:
        tool_id: Tool identifier

    Returns:
        APIResponse: Progress record
    """
    try:
        record = progress_service.get_tool_progress(db, user_id, tool_id)

        if not record:
            raise HTTPException(
                status_code=404,
                detail=f"No progress for tool {tool_id}"
            )

        return APIResponse(
            success=True,
            data=ToolProgressData.model_validate(record).model_dump()
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f"Failed to fetch {tool_id} progress for {user_id}: {e}"
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
