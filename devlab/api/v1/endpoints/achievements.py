"""
Achievement endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db, verify_token
from common.schemas import (
    AchievementAwardData,
    AchievementAwardRequest,
    AchievementData,
    APIResponse,
)
from modules import achievement_service
from modules.errors import InvalidArgumentError, StorageConflictError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/achievements",
    response_model=APIResponse,
    tags=["Achievements"]
)
async def award_achievement(
    request: AchievementAwardRequest,
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Award an achievement. Awarding one the caller already holds is a no-op.

    Args:
        request: Achievement details

    Returns:
        APIResponse: Stored achievement and whether it is new
    """
    try:
        outcome = achievement_service.award_achievement(
            db,
            user_id,
            request.achievement_type,
            request.name,
            request.description,
            request.tool_id
        )
        return APIResponse(
            success=True,
            data=AchievementAwardData(
                achievement=AchievementData.model_validate(
                    outcome.achievement
                ),
                created=outcome.created
            ).model_dump()
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to award achievement to {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get(
    "/achievements",
    response_model=APIResponse,
    tags=["Achievements"]
)
async def list_achievements(
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    List the caller's achievements, newest first.

    Returns:
        APIResponse: Achievements
    """
    try:
        achievements = achievement_service.get_user_achievements(db, user_id)
        return APIResponse(
            success=True,
            data=[
                AchievementData.model_validate(achievement).model_dump()
                for achievement in achievements
            ]
        )
    except Exception as e:
        logger.error(f"Failed to fetch achievements for {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
