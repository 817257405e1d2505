"""
Playground endpoints: validation, simulated runs and run history.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.dependencies import (
    get_current_user_id,
    get_db,
    get_settings,
    get_simulator,
    get_validator,
    verify_token,
)
from common.config import Settings
from common.schemas import (
    APIResponse,
    CodeExecutionData,
    CodeExecutionRunData,
    PlaygroundRequest,
    PlaygroundRunData,
)
from modules import achievement_service, execution_service
from modules.achievement_service import AchievementType
from modules.errors import InvalidArgumentError, StorageConflictError
from modules.rule_catalog import Tool
from modules.simulator import ExecutionSimulator, run_playground
from modules.validator import Validator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/tools",
    response_model=APIResponse,
    tags=["Playground"]
)
async def list_tools(_token: str = Depends(verify_token)):
    """
    List tool identifiers that have a rule set.

    Returns:
        APIResponse: Tool identifiers
    """
    return APIResponse(
        success=True,
        data={"tools": [tool.value for tool in Tool]}
    )


@router.post(
    "/playground/validate",
    response_model=APIResponse,
    tags=["Playground"]
)
async def validate_code(
    request: PlaygroundRequest,
    _token: str = Depends(verify_token),
    validator: Validator = Depends(get_validator)
):
    """
    Validate a configuration snippet without running it.

    Args:
        request: Tool and code to check

    Returns:
        APIResponse: Validation verdict
    """
    verdict = validator.validate(request.tool_id, request.code)
    return APIResponse(success=True, data=verdict.model_dump())


@router.post(
    "/playground/run",
    response_model=APIResponse,
    tags=["Playground"]
)
async def run_code(
    request: PlaygroundRequest,
    _token: str = Depends(verify_token),
    validator: Validator = Depends(get_validator),
    simulator: ExecutionSimulator = Depends(get_simulator)
):
    """
    Validate a snippet and simulate its execution. Nothing is stored.

    Args:
        request: Tool and code to run

    Returns:
        APIResponse: Verdict and execution result
    """
    verdict, result = run_playground(
        request.tool_id,
        request.code,
        validator=validator,
        simulator=simulator
    )
    return APIResponse(
        success=True,
        data=PlaygroundRunData(
            validation=verdict,
            execution=result
        ).model_dump()
    )


@router.post(
    "/code-executions",
    response_model=APIResponse,
    tags=["Playground"]
)
async def create_code_execution(
    request: PlaygroundRequest,
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    validator: Validator = Depends(get_validator),
    simulator: ExecutionSimulator = Depends(get_simulator)
):
    """
    Run a snippet, store the run and unlock Code Runner on success.

    Args:
        request: Tool and code to run

    Returns:
        APIResponse: Stored run with verdict and result
    """
    try:
        verdict, result = run_playground(
            request.tool_id,
            request.code,
            validator=validator,
            simulator=simulator
        )
        execution = execution_service.record_code_execution(
            db,
            user_id,
            request.tool_id,
            request.code,
            verdict,
            result
        )

        awarded = []
        if result.success:
            outcome = achievement_service.award_builtin(
                db,
                user_id,
                AchievementType.CODE_EXECUTION,
                tool_id=request.tool_id
            )
            if outcome.created:
                awarded.append(AchievementType.CODE_EXECUTION.value)

        return APIResponse(
            success=True,
            data=CodeExecutionRunData(
                record=CodeExecutionData.model_validate(
                    execution,
                    from_attributes=True
                ),
                validation=verdict,
                execution=result,
                achievements_awarded=awarded
            ).model_dump()
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to record code execution: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get(
    "/code-executions",
    response_model=APIResponse,
    tags=["Playground"]
)
async def list_code_executions(
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    _token: str = Depends(verify_token),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    List the caller's recent playground runs, newest first.

    Args:
        limit: Maximum number of runs (defaults to configuration)

    Returns:
        APIResponse: Run history
    """
    try:
        executions = execution_service.get_user_code_executions(
            db,
            user_id,
            limit or settings.execution_history_limit
        )
        return APIResponse(
            success=True,
            data=[
                CodeExecutionData.model_validate(
                    execution,
                    from_attributes=True
                ).model_dump()
                for execution in executions
            ]
        )
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to fetch code executions for {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )
