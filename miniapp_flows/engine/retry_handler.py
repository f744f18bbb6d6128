"""Retry advice for actions that returned an error result."""

import logging
from typing import Optional, Tuple
from pydantic import ValidationError
from miniapp_shared.exceptions import StepError
from miniapp_shared.types import ExecutionResult, ExecutionStatus
from miniapp_shared.constants import (
    MAX_RETRY_ATTEMPTS,
    INITIAL_RETRY_DELAY_SECONDS,
    MAX_RETRY_DELAY_SECONDS,
)


class RetryHandler:
    """Decides when a caller should retry a failed step and calculates backoff delays.

    The executor never retries on its own; it keeps the failed action current,
    so retrying is just calling step() again after the returned delay.
    """
    
    def __init__(self, max_attempts: int = MAX_RETRY_ATTEMPTS):
        self.max_attempts = max_attempts
    
    def should_retry(self, result: ExecutionResult, attempt: int) -> Tuple[bool, Optional[float]]:
        """Checks if the step should be retried; `attempt` counts retries already made"""
        if result.status != ExecutionStatus.ERROR:
            return False, None
        
        step_error = self._parse_step_error(result)
        if not step_error or not step_error.is_retryable:
            logging.info(
                "Step error is not retryable",
                extra={"node_id": result.node_id, "error": result.error}
            )
            return False, None
        
        if attempt >= self.max_attempts:
            logging.warning(
                "Maximum retry attempts reached",
                extra={
                    "node_id": result.node_id,
                    "retry_count": attempt,
                    "max_attempts": self.max_attempts
                }
            )
            return False, None
        
        delay = self._calculate_backoff_delay(attempt, step_error)
        
        logging.info(
            "Step will be retried",
            extra={
                "node_id": result.node_id,
                "retry_attempt": attempt + 1,
                "delay_seconds": delay
            }
        )
        
        return True, delay
    
    def _parse_step_error(self, result: ExecutionResult) -> Optional[StepError]:
        if not isinstance(result.data, dict) or "error_type" not in result.data:
            return None
        try:
            return StepError(**result.data)
        except ValidationError as e:
            logging.debug(f"Failed to parse error details as StepError: {e}")
        return None
    
    def _calculate_backoff_delay(self, attempt: int, step_error: StepError) -> float:
        """Exponential backoff with Retry-After header support"""
        if step_error.retry_after_seconds:
            # Honor Retry-After header (e.g., from 429 responses)
            delay = min(step_error.retry_after_seconds, MAX_RETRY_DELAY_SECONDS)
        else:
            # Exponential backoff: 1s, 2s, 4s, 8s, ...
            delay = min(
                INITIAL_RETRY_DELAY_SECONDS * (2 ** attempt),
                MAX_RETRY_DELAY_SECONDS
            )
        
        return delay
