"""
Per-user endpoints: overall stats and account data removal.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id, get_db, verify_token
from common.schemas import APIResponse
from modules import execution_service, user_service
from modules.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/stats",
    response_model=APIResponse,
    tags=["Users"]
)
async def get_stats(
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get aggregate statistics for the caller.

    Returns:
        APIResponse: Overall stats
    """
    try:
        stats = execution_service.get_overall_stats(db, user_id)
        return APIResponse(success=True, data=stats.model_dump())
    except Exception as e:
        logger.error(f"Failed to compute stats for {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.delete(
    "/users/me",
    response_model=APIResponse,
    tags=["Users"]
)
async def delete_current_user(
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete the caller and all of their progress, achievements and runs.

    Returns:
        APIResponse: Deleted user id
    """
    try:
        user_service.delete_user(db, user_id)
        return APIResponse(success=True, data={"user_id": user_id})
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete user {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
