"""Step-driven executor for validated action flows."""

import copy
import logging
from typing import Any, Dict, List, Optional
from miniapp_flows.capabilities.registry import Capabilities
from miniapp_flows.engine.conditions import evaluate_all
from miniapp_flows.engine.steps import get_step_handler
from miniapp_shared.constants import (
    CONTEXT_LAST_ACTION_ID,
    CONTEXT_LAST_ERROR,
    CONTEXT_LAST_RESULT,
)
from miniapp_shared.exceptions import CapabilityError
from miniapp_shared.logging_config import correlation_scope
from miniapp_shared.types import (
    ExecutionResult,
    ExecutionState,
    ExecutionStatus,
    Flow,
    Node,
    NodeType,
)
from miniapp_shared.utils import generate_run_id


class FlowExecutor:
    """Interprets one run of a flow, one step() call at a time.

    The executor owns its context and history and never mutates the flow.
    Failures come back as error results and leave the current action in
    place so the caller can retry it. Calls must not overlap on one instance.
    """

    def __init__(
        self,
        flow: Flow,
        initial_context: Optional[Dict[str, Any]] = None,
        capabilities: Optional[Capabilities] = None,
        run_id: Optional[str] = None
    ):
        self.flow = flow
        self.capabilities = capabilities or Capabilities()
        self.run_id = run_id or generate_run_id()
        self._nodes: Dict[str, Node] = {node.id: node for node in flow.nodes}
        self._context: Dict[str, Any] = copy.deepcopy(dict(initial_context or {}))
        self._history: List[ExecutionResult] = []
        self._current_node_id: Optional[str] = flow.initial_node_id
        self._state = ExecutionState.RUNNING

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def current_node_id(self) -> Optional[str]:
        return self._current_node_id

    def get_current_node(self) -> Optional[Node]:
        if not self._current_node_id:
            return None
        return self._nodes.get(self._current_node_id)

    def get_context(self) -> Dict[str, Any]:
        return copy.deepcopy(self._context)

    def get_history(self) -> List[ExecutionResult]:
        return [result.model_copy(deep=True) for result in self._history]

    def is_completed(self) -> bool:
        return self._state == ExecutionState.COMPLETED

    def is_halted(self) -> bool:
        """True when the run ended on an action with no matching edge"""
        return self._state == ExecutionState.HALTED

    def is_finished(self) -> bool:
        return self._state in (ExecutionState.COMPLETED, ExecutionState.HALTED)

    def step(self, inputs: Optional[Dict[str, Any]] = None) -> ExecutionResult:
        """Executes the current action with the given user input and advances.

        The run id is the correlation id for the step unless the caller set one.
        """
        with correlation_scope(self.run_id):
            return self._step(inputs)

    def _step(self, inputs: Optional[Dict[str, Any]]) -> ExecutionResult:
        if self.is_finished() or not self._current_node_id:
            return ExecutionResult(
                node_id="none",
                status=ExecutionStatus.ERROR,
                error="No current action or flow already completed"
            )

        node = self._nodes.get(self._current_node_id)
        if node is None:
            return ExecutionResult(
                node_id=self._current_node_id,
                status=ExecutionStatus.ERROR,
                error=f"Action '{self._current_node_id}' not found"
            )

        inputs = copy.deepcopy(dict(inputs or {}))
        self._context.update(inputs)

        logging.info("Dispatching action", extra={
            "run_id": self.run_id,
            "node_id": node.id,
            "node_type": node.type
        })

        try:
            result = get_step_handler(node.type)(node, self._context, inputs, self.capabilities)
        except Exception as e:
            return self._record_failure(node, e)

        self._context[CONTEXT_LAST_RESULT] = result.to_dict()
        self._context[CONTEXT_LAST_ACTION_ID] = node.id

        if result.status == ExecutionStatus.ERROR:
            self._context[CONTEXT_LAST_ERROR] = result.error
            self._state = ExecutionState.RUNNING
            logging.warning("Action returned an error", extra={
                "run_id": self.run_id,
                "node_id": node.id,
                "error": result.error
            })
        elif result.status == ExecutionStatus.WAITING:
            self._state = ExecutionState.WAITING_FOR_INPUT
            logging.info("Waiting for user input", extra={"run_id": self.run_id, "node_id": node.id})
        elif node.type == NodeType.COMPLETION.value:
            self._state = ExecutionState.COMPLETED
            self._current_node_id = None
            logging.info("Flow completed", extra={"run_id": self.run_id, "node_id": node.id})
        elif result.status == ExecutionStatus.SUCCESS:
            self._advance(node, result)

        self._history.append(result)
        return result.model_copy(deep=True)

    def _advance(self, node: Node, result: ExecutionResult) -> None:
        """Moves to the decision target or the first edge whose conditions hold"""
        if node.type == NodeType.DECISION.value:
            next_node_id = result.next_node_id
        else:
            next_node_id = self._select_next_node(node)

        if not next_node_id:
            self._state = ExecutionState.HALTED
            self._current_node_id = None
            logging.info("Flow ended without completion", extra={
                "run_id": self.run_id,
                "node_id": node.id
            })
            return

        result.next_node_id = next_node_id
        self._context[CONTEXT_LAST_RESULT] = result.to_dict()
        self._current_node_id = next_node_id
        self._state = ExecutionState.RUNNING

        logging.info("Advanced to next action", extra={
            "run_id": self.run_id,
            "node_id": node.id,
            "next_node_id": next_node_id
        })

    def _select_next_node(self, node: Node) -> Optional[str]:
        for edge in node.edges:
            if evaluate_all(edge.conditions, self._context):
                return edge.target_node_id
        return None

    def _record_failure(self, node: Node, error: Exception) -> ExecutionResult:
        """Records a raised failure without moving off the current action"""
        result = ExecutionResult(
            node_id=node.id,
            status=ExecutionStatus.ERROR,
            error=str(error)
        )
        if isinstance(error, CapabilityError):
            result.data = error.error.to_dict()

        self._context[CONTEXT_LAST_RESULT] = result.to_dict()
        self._context[CONTEXT_LAST_ACTION_ID] = node.id
        self._context[CONTEXT_LAST_ERROR] = result.error
        self._history.append(result)
        self._state = ExecutionState.RUNNING

        logging.error("Action failed", extra={
            "run_id": self.run_id,
            "node_id": node.id,
            "node_type": node.type,
            "error": result.error
        })
        return result.model_copy(deep=True)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-serializable run state, restorable with from_snapshot()"""
        return {
            "runId": self.run_id,
            "flow": self.flow.to_document(),
            "state": self._state.value,
            "currentNodeId": self._current_node_id,
            "context": copy.deepcopy(self._context),
            "history": [result.to_dict() for result in self._history],
        }

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any], capabilities: Optional[Capabilities] = None) -> "FlowExecutor":
        flow = Flow.model_validate(snapshot["flow"])
        executor = cls(flow, capabilities=capabilities, run_id=snapshot.get("runId"))
        executor._context = copy.deepcopy(snapshot.get("context", {}))
        executor._history = [ExecutionResult.model_validate(r) for r in snapshot.get("history", [])]
        executor._current_node_id = snapshot.get("currentNodeId")
        executor._state = ExecutionState(snapshot.get("state", ExecutionState.RUNNING.value))
        return executor
