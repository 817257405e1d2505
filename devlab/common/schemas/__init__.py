"""
Pydantic schemas for API request and response models.

Also hosts the playground value objects (ValidationVerdict and
ExecutionResult) shared by the business modules and the API.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


# Base response wrapper
class APIResponse(BaseModel):
    """Standard API response wrapper."""

    success: bool = Field(..., description="Operation success status")
    data: Optional[Any] = Field(
        default=None,
        description="Response data"
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message if success=False"
    )


# Health check schemas
class HealthData(BaseModel):
    """Health check response data."""

    status: str = Field(..., description="healthy or unhealthy")
    database: str = Field(..., description="Database backend name")
    tools: int = Field(..., description="Tools with a loaded rule set")


# Playground value objects
class ValidationVerdict(BaseModel):
    """
    Structured outcome of validating a configuration snippet.

    Immutable once built. ``is_valid`` is derived from ``errors``.
    """

    model_config = ConfigDict(frozen=True)

    errors: list[str] = Field(
        default_factory=list,
        description="Hard failures; any entry blocks execution"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking concerns"
    )
    suggestions: list[str] = Field(
        default_factory=list,
        description="Style and optimization hints"
    )

    @computed_field  # type: ignore[misc]
    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0


class ExecutionResult(BaseModel):
    """Simulated execution transcript for a playground run."""

    model_config = ConfigDict(frozen=True)

    success: bool = Field(..., description="Whether the run succeeded")
    output: str = Field(..., description="Synthesized multi-line transcript")
    execution_time_ms: int = Field(
        ...,
        ge=0,
        description="Synthetic duration in milliseconds"
    )
    resources_created: list[str] = Field(
        default_factory=list,
        description="Resources the run pretends to have created"
    )
    next_steps: list[str] = Field(
        default_factory=list,
        description="Follow-up command hints"
    )


# Playground schemas
class PlaygroundRequest(BaseModel):
    """Request body for validating or running a snippet."""

    tool_id: str = Field(..., min_length=1, description="Tool identifier")
    code: str = Field(
        default="",
        description="Configuration text to check"
    )


class PlaygroundRunData(BaseModel):
    """Response data for a validate-and-run call."""

    validation: ValidationVerdict
    execution: ExecutionResult


class CodeExecutionData(BaseModel):
    """Persisted playground run."""

    id: str = Field(..., description="Execution record identifier")
    tool_id: str = Field(..., description="Tool identifier")
    code: str = Field(..., description="Submitted configuration text")
    validation_result: dict[str, Any] = Field(
        ...,
        description="Serialized validation verdict"
    )
    execution_result: dict[str, Any] = Field(
        ...,
        description="Serialized execution result"
    )
    success: bool = Field(..., description="Run outcome")
    created_at: datetime = Field(..., description="Creation timestamp")


class CodeExecutionRunData(BaseModel):
    """Response data for a recorded playground run."""

    record: CodeExecutionData
    validation: ValidationVerdict
    execution: ExecutionResult
    achievements_awarded: list[str] = Field(
        default_factory=list,
        description="Achievement types unlocked by this run"
    )


# Progress schemas
class ProgressAdvanceRequest(BaseModel):
    """Request body for advancing a tool's progress."""

    tool_id: str = Field(..., min_length=1, description="Tool identifier")
    tool_name: str = Field(..., min_length=1, description="Display label")
    step_index: int = Field(..., description="Zero-based step index")
    total_steps: int = Field(..., description="Length of the step sequence")


class ToolProgressData(BaseModel):
    """Progress record for one tool."""

    model_config = ConfigDict(from_attributes=True)

    tool_id: str = Field(..., description="Tool identifier")
    tool_name: str = Field(..., description="Display label")
    current_step: int = Field(..., description="Last submitted step")
    total_steps: int = Field(..., description="Step sequence length")
    completed_steps: list[int] = Field(
        ...,
        description="Distinct completed step indices"
    )
    status: str = Field(
        ...,
        description="Progress status (in_progress/completed)"
    )
    started_at: datetime = Field(..., description="First activity timestamp")
    last_activity_at: datetime = Field(
        ...,
        description="Latest activity timestamp"
    )
    completed_at: Optional[datetime] = Field(
        default=None,
        description="Completion timestamp"
    )


class ProgressAdvanceData(BaseModel):
    """Response data for a progress advance."""

    progress: ToolProgressData
    achievements_awarded: list[str] = Field(
        default_factory=list,
        description="Achievement types unlocked by this step"
    )


# Achievement schemas
class AchievementAwardRequest(BaseModel):
    """Request body for awarding an achievement."""

    achievement_type: str = Field(
        ...,
        min_length=1,
        description="Achievement type"
    )
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field(..., description="Human-readable description")
    tool_id: Optional[str] = Field(
        default=None,
        description="Tool the achievement is tied to"
    )


class AchievementData(BaseModel):
    """Achievement record."""

    model_config = ConfigDict(from_attributes=True)

    achievement_type: str = Field(..., description="Achievement type")
    name: str = Field(..., description="Display name")
    description: str = Field(..., description="Description")
    tool_id: Optional[str] = Field(default=None, description="Tool id")
    earned_at: datetime = Field(..., description="Unlock timestamp")


class AchievementAwardData(BaseModel):
    """Response data for an award attempt."""

    achievement: AchievementData
    created: bool = Field(
        ...,
        description="False when the achievement was already held"
    )


# Stats schemas
class OverallStatsData(BaseModel):
    """Aggregate learner statistics."""

    total_tools: int
    completed_tools: int
    in_progress_tools: int
    total_achievements: int
    successful_executions: int
    total_executions: int
    success_rate: int = Field(
        ...,
        description="Successful executions as a rounded percentage"
    )
