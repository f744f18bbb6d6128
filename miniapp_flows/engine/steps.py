"""Per-kind step handlers, registered by node type."""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List
from miniapp_flows.capabilities.registry import Capabilities
from miniapp_flows.engine.paths import MISSING
from miniapp_flows.engine.template import resolve_recursive, substitute, substitute_recursive
from miniapp_shared.constants import CONTEXT_USER_CHOICE
from miniapp_shared.exceptions import StepDispatchError
from miniapp_shared.types import (
    BlockchainNode,
    CompletionNode,
    DecisionNode,
    ExecutionResult,
    ExecutionStatus,
    HttpNode,
    Node,
    NodeType,
    TransferNode,
)
from miniapp_shared.utils import generate_response_id, utc_timestamp

StepHandler = Callable[[Node, Dict[str, Any], Dict[str, Any], Capabilities], ExecutionResult]
_step_registry: Dict[str, StepHandler] = {}


def register_step(node_type: NodeType):
    def decorator(func: StepHandler):
        _step_registry[node_type.value] = func
        return func
    return decorator


def get_step_handler(node_type: str) -> StepHandler:
    if node_type not in _step_registry:
        raise StepDispatchError(f"Unknown action type: {node_type}")
    return _step_registry[node_type]


def list_step_types() -> List[str]:
    return list(_step_registry.keys())


@register_step(NodeType.BLOCKCHAIN)
def blockchain_step(node: BlockchainNode, context: Dict[str, Any], inputs: Dict[str, Any],
                    capabilities: Capabilities) -> ExecutionResult:
    if node.params:
        params = resolve_recursive(list(node.params), context)
    else:
        params = inputs.get("params", [])

    receipt = capabilities.chain.send_blockchain_call(
        node.address, node.function_name, params, node.chains, node.amount
    )
    return ExecutionResult(
        node_id=node.id,
        status=ExecutionStatus.SUCCESS,
        data={"txHandle": _tx_handle(receipt), "params": params}
    )


@register_step(NodeType.TRANSFER)
def transfer_step(node: TransferNode, context: Dict[str, Any], inputs: Dict[str, Any],
                  capabilities: Capabilities) -> ExecutionResult:
    to = substitute(node.to, context) if node.to else None

    receipt = capabilities.chain.send_transfer(to, node.amount, node.chains)
    return ExecutionResult(
        node_id=node.id,
        status=ExecutionStatus.SUCCESS,
        data={"txHandle": _tx_handle(receipt), "to": to, "amount": node.amount}
    )


@register_step(NodeType.HTTP)
def http_step(node: HttpNode, context: Dict[str, Any], inputs: Dict[str, Any],
              capabilities: Capabilities) -> ExecutionResult:
    endpoint = substitute(node.endpoint, context)
    headers = substitute_recursive(dict(node.headers), context)
    body = substitute_recursive(dict(node.body), context)

    # Declared form fields are filled from the context (user input is merged there)
    for param in node.params:
        value = context.get(param.name, MISSING)
        if value is MISSING or value is None:
            value = param.default_value
        if value is None:
            if param.required:
                raise StepDispatchError(f"Missing required parameter: {param.name}", node_id=node.id)
            continue
        body[param.name] = value

    response = capabilities.http.send_http_request(endpoint, node.method, body, headers)

    data = dict(response) if isinstance(response, Mapping) else {"response": response}
    data["responseId"] = generate_response_id()
    data["timestamp"] = utc_timestamp()
    return ExecutionResult(node_id=node.id, status=ExecutionStatus.SUCCESS, data=data)


@register_step(NodeType.DECISION)
def decision_step(node: DecisionNode, context: Dict[str, Any], inputs: Dict[str, Any],
                  capabilities: Capabilities) -> ExecutionResult:
    choice = inputs.get(CONTEXT_USER_CHOICE)
    if choice is None or choice == "":
        return ExecutionResult(
            node_id=node.id,
            status=ExecutionStatus.WAITING,
            data={
                "title": node.title,
                "options": [{"label": opt.label, "value": opt.value} for opt in node.options]
            }
        )

    selected = next((opt for opt in node.options if opt.value == choice), None)
    if selected is None:
        return ExecutionResult(
            node_id=node.id,
            status=ExecutionStatus.ERROR,
            error=f"Invalid choice: {choice}"
        )

    context[CONTEXT_USER_CHOICE] = choice
    return ExecutionResult(
        node_id=node.id,
        status=ExecutionStatus.SUCCESS,
        data={"choice": choice, "selectedOption": selected.label},
        next_node_id=selected.target_node_id
    )


@register_step(NodeType.COMPLETION)
def completion_step(node: CompletionNode, context: Dict[str, Any], inputs: Dict[str, Any],
                    capabilities: Capabilities) -> ExecutionResult:
    return ExecutionResult(
        node_id=node.id,
        status=ExecutionStatus.SUCCESS,
        data={"message": node.message, "status": node.status}
    )


def _tx_handle(receipt: Any) -> str:
    if isinstance(receipt, Mapping):
        handle = receipt.get("txHandle")
    else:
        handle = receipt
    if not handle:
        raise StepDispatchError("Chain client returned no transaction handle")
    return str(handle)
