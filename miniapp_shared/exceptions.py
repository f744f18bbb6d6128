"""Structured exception hierarchy for flow validation and execution."""

from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class StepError(BaseModel):
    """Structured error raised by capabilities and recorded on error results"""
    error_type: str
    error_message: str
    http_status_code: Optional[int] = None
    retry_after_seconds: Optional[int] = None
    is_retryable: bool = False
    context: Dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FlowError(Exception):
    """Base exception for flow errors"""
    
    def __init__(self, message: str, node_id: str = "", **context):
        self.message = message
        self.node_id = node_id
        self.context = context
        super().__init__(message)


class GraphValidationError(FlowError):
    pass


class StepDispatchError(FlowError):
    pass


class CapabilityError(StepDispatchError):
    """A capability (chain or HTTP) failed; carries the structured StepError"""

    def __init__(self, error: StepError, node_id: str = ""):
        self.error = error
        super().__init__(error.error_message, node_id=node_id, error_type=error.error_type)
