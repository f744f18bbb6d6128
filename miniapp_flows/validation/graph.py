"""Flow graph validation: ids, references, reachability and per-node shape."""

import re
from collections import deque
from typing import Any, Dict, List, Set, Union
from pydantic import ValidationError
from miniapp_flows.engine.template import has_placeholder
from miniapp_shared.constants import (
    CHOICE_PARAMETER_TYPES,
    COMPLETION_STATUSES,
    HTTP_PARAMETER_TYPES,
    MAX_NODES_PER_FLOW,
    VALID_CHAINS,
)
from miniapp_shared.exceptions import GraphValidationError
from miniapp_shared.types import (
    BlockchainNode,
    ChainContext,
    CompletionNode,
    DecisionNode,
    Flow,
    HttpNode,
    HttpParameter,
    Node,
    TransferNode,
)
from miniapp_shared.utils import is_address, is_datetime, is_email, is_url

_DEFAULT_VALUE_CHECKS = {
    "email": is_email,
    "url": is_url,
    "datetime": is_datetime,
}


def validate_flow(flow: Union[Flow, Dict[str, Any]]) -> Flow:
    """Checks a flow is safe to execute and returns it unchanged.

    Structural checks run before graph-shape checks, which run before
    per-node checks, so the most fundamental problem is the one reported.
    """
    if not isinstance(flow, Flow):
        flow = parse_flow(flow)

    nodes = flow.nodes
    if not nodes:
        raise GraphValidationError("Flow must have at least one action")

    if len(nodes) > MAX_NODES_PER_FLOW:
        raise GraphValidationError(f"Flow exceeds maximum action limit: {len(nodes)} > {MAX_NODES_PER_FLOW}")

    if not flow.initial_node_id:
        raise GraphValidationError("Flow must have an initialActionId")

    if not any(node.id == flow.initial_node_id for node in nodes):
        raise GraphValidationError(
            f"initialActionId '{flow.initial_node_id}' does not match any action",
            node_id=flow.initial_node_id
        )

    node_map = build_node_index(nodes)

    for node in nodes:
        for target_id in referenced_ids(node):
            if target_id not in node_map:
                raise GraphValidationError(
                    f"Action '{node.id}' references non-existent action '{target_id}'",
                    node_id=node.id
                )

    reachable = reachable_node_ids(flow)
    unreachable = [node.id for node in nodes if node.id not in reachable]
    if unreachable:
        raise GraphValidationError(
            f"The following actions are unreachable: {', '.join(unreachable)}",
            unreachable=unreachable
        )

    if not flow.label:
        raise GraphValidationError("Flow must have a label")

    for node in nodes:
        validate_node(node)

    return flow


def parse_flow(document: Dict[str, Any]) -> Flow:
    """Parses a raw flow document, reporting schema problems as validation errors"""
    if not isinstance(document, dict):
        raise GraphValidationError("Flow definition must be an object")
    try:
        return Flow.model_validate(document)
    except ValidationError as e:
        raise GraphValidationError(f"Invalid flow definition: {e}")


def build_node_index(nodes: List[Node]) -> Dict[str, Node]:
    node_map = {}
    for node in nodes:
        if not node.id:
            raise GraphValidationError("All actions must have an 'id' field")

        if node.id in node_map:
            raise GraphValidationError(f"Duplicate action ID: {node.id}", node_id=node.id)

        node_map[node.id] = node
    return node_map


def successor_ids(node: Node) -> List[str]:
    """Targets a node can transition to: decision options, else its edges"""
    if isinstance(node, DecisionNode):
        return [option.target_node_id for option in node.options]
    return [edge.target_node_id for edge in node.edges]


def referenced_ids(node: Node) -> List[str]:
    """Every id a node points at, including edges a decision never follows"""
    edge_targets = [edge.target_node_id for edge in node.edges]
    if isinstance(node, DecisionNode):
        return [option.target_node_id for option in node.options] + edge_targets
    return edge_targets


def reachable_node_ids(flow: Flow) -> Set[str]:
    """BFS from the initial action over edges and decision options"""
    node_map = {node.id: node for node in flow.nodes}
    queue = deque([flow.initial_node_id])
    visited = set()

    while queue:
        node_id = queue.popleft()
        if node_id in visited or node_id not in node_map:
            continue
        visited.add(node_id)

        for target_id in successor_ids(node_map[node_id]):
            if target_id not in visited:
                queue.append(target_id)

    return visited


def validate_node(node: Node) -> None:
    """Checks a node's kind-specific fields"""
    if not node.label:
        raise GraphValidationError(f"Action '{node.id}' must have a label", node_id=node.id)

    for edge in node.edges:
        for condition in edge.conditions:
            if not condition.field:
                raise GraphValidationError(
                    f"Condition in nextAction '{edge.target_node_id}' from action '{node.id}' must have a field",
                    node_id=node.id
                )

    validators = {
        DecisionNode: _validate_decision,
        CompletionNode: _validate_completion,
        BlockchainNode: _validate_blockchain,
        TransferNode: _validate_transfer,
        HttpNode: _validate_http,
    }
    validators[type(node)](node)


def _validate_decision(node: DecisionNode) -> None:
    if not node.options:
        raise GraphValidationError(f"Decision action '{node.id}' must have at least one option", node_id=node.id)

    if not node.title:
        raise GraphValidationError(f"Decision action '{node.id}' must have a title", node_id=node.id)

    seen_values = set()
    for option in node.options:
        if not option.label:
            raise GraphValidationError(
                f"Option in decision action '{node.id}' must have a label", node_id=node.id
            )
        if option.value in seen_values:
            raise GraphValidationError(
                f"Decision action '{node.id}' has duplicate option value: {option.value}", node_id=node.id
            )
        seen_values.add(option.value)


def _validate_completion(node: CompletionNode) -> None:
    if node.edges:
        raise GraphValidationError(
            f"Completion action '{node.id}' must not have outgoing edges", node_id=node.id
        )

    if not node.message:
        raise GraphValidationError(f"Completion action '{node.id}' must have a message", node_id=node.id)

    if node.status not in COMPLETION_STATUSES:
        raise GraphValidationError(
            f"Completion action '{node.id}' must have a valid status ({', '.join(sorted(COMPLETION_STATUSES))})",
            node_id=node.id
        )


def _validate_blockchain(node: BlockchainNode) -> None:
    if not is_address(node.address):
        raise GraphValidationError(
            f"Blockchain action '{node.id}' has invalid address: {node.address}", node_id=node.id
        )

    if not node.function_name:
        raise GraphValidationError(f"Blockchain action '{node.id}' must have a functionName", node_id=node.id)

    if not node.abi:
        raise GraphValidationError(f"Blockchain action '{node.id}' must have a valid ABI", node_id=node.id)

    _validate_chains(node.id, node.chains)


def _validate_transfer(node: TransferNode) -> None:
    if node.to and not has_placeholder(node.to) and not is_address(node.to):
        raise GraphValidationError(
            f"Transfer action '{node.id}' has invalid address: {node.to}", node_id=node.id
        )

    if node.amount is None or node.amount <= 0:
        raise GraphValidationError(f"Transfer action '{node.id}' must have a positive amount", node_id=node.id)

    _validate_chains(node.id, node.chains)


def _validate_http(node: HttpNode) -> None:
    if not has_placeholder(node.endpoint) and not is_url(node.endpoint):
        raise GraphValidationError(
            f"HTTP action '{node.id}' has invalid endpoint URL: {node.endpoint}", node_id=node.id
        )

    names = set()
    for param in node.params:
        if not param.name:
            raise GraphValidationError(f"HTTP action '{node.id}' has a parameter without a name", node_id=node.id)

        if param.name in names:
            raise GraphValidationError(
                f"HTTP action '{node.id}' has duplicate parameter: {param.name}", node_id=node.id
            )
        names.add(param.name)

        if not param.label:
            raise GraphValidationError(
                f"HTTP action '{node.id}' parameter '{param.name}' must have a label", node_id=node.id
            )

        if param.type not in HTTP_PARAMETER_TYPES:
            raise GraphValidationError(
                f"HTTP action '{node.id}' parameter '{param.name}' has invalid type: {param.type}",
                node_id=node.id
            )

        if param.type in CHOICE_PARAMETER_TYPES:
            _validate_choice_parameter(node.id, param)
        else:
            _validate_standard_parameter(node.id, param)


def _validate_choice_parameter(node_id: str, param: HttpParameter) -> None:
    if not param.options:
        raise GraphValidationError(
            f"HTTP action '{node_id}' parameter '{param.name}' must have options", node_id=node_id
        )

    for option in param.options:
        if not option.label:
            raise GraphValidationError(
                f"HTTP action '{node_id}' parameter '{param.name}' has an option without a label",
                node_id=node_id
            )

    if param.default_value is not None and not any(
        option.value == param.default_value for option in param.options
    ):
        raise GraphValidationError(
            f"HTTP action '{node_id}' parameter '{param.name}' has invalid default value",
            node_id=node_id
        )


def _validate_standard_parameter(node_id: str, param: HttpParameter) -> None:
    checker = _DEFAULT_VALUE_CHECKS.get(param.type)
    if checker and param.default_value is not None and not checker(param.default_value):
        raise GraphValidationError(
            f"HTTP action '{node_id}' parameter '{param.name}' has invalid {param.type} default value: "
            f"{param.default_value}",
            node_id=node_id
        )

    if param.pattern:
        try:
            re.compile(param.pattern)
        except re.error as e:
            raise GraphValidationError(
                f"HTTP action '{node_id}' parameter '{param.name}' has invalid pattern: {e}",
                node_id=node_id
            )



def _validate_chains(node_id: str, chains: ChainContext) -> None:
    for chain in (chains.source, chains.destination):
        if chain is not None and chain not in VALID_CHAINS:
            raise GraphValidationError(
                f"Action '{node_id}' uses unsupported chain '{chain}'. "
                f"Allowed chains: {', '.join(VALID_CHAINS)}",
                node_id=node_id
            )
