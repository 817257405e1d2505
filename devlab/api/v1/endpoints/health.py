"""
Health check endpoint.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_validator
from common.schemas import APIResponse, HealthData
from modules.validator import Validator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=APIResponse,
    tags=["Health"]
)
async def health_check(
    db: Session = Depends(get_db),
    validator: Validator = Depends(get_validator)
):
    """
    Report database reachability and the loaded rule catalog size.

    Unauthenticated so load balancers can probe it.
    """
    try:
        db.execute(text("SELECT 1"))
        status = "healthy"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        status = "unhealthy"

    return APIResponse(
        success=status == "healthy",
        data=HealthData(
            status=status,
            database=db.get_bind().dialect.name,
            tools=len(validator.catalog)
        ).model_dump()
    )
