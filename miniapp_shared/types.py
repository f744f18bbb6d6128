"""Shared types for flow definitions, execution results and runtime state."""

from enum import Enum
from typing import Dict, List, Any, Optional, Union, Literal
from typing import Annotated
from pydantic import BaseModel, ConfigDict, Field
from miniapp_shared.constants import DEFAULT_HTTP_METHOD


class NodeType(str, Enum):
    BLOCKCHAIN = "blockchain"
    TRANSFER = "transfer"
    HTTP = "http"
    DECISION = "decision"
    COMPLETION = "completion"


class ExecutionStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WAITING = "waiting"
    SKIPPED = "skipped"


class ExecutionState(str, Enum):
    RUNNING = "running"
    WAITING_FOR_INPUT = "waiting_for_input"
    COMPLETED = "completed"
    HALTED = "halted"


ScalarValue = Union[bool, int, float, str]


class FlowModel(BaseModel):
    """Base for flow document models: frozen, accepts aliases and field names"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Condition(FlowModel):
    field: str
    operator: Literal["eq", "ne", "gt", "lt", "gte", "lte", "contains"]
    value: ScalarValue


class Edge(FlowModel):
    target_node_id: str = Field(alias="actionId")
    conditions: List[Condition] = Field(default_factory=list)


class DecisionOption(FlowModel):
    label: str
    value: str
    target_node_id: str = Field(alias="nextActionId")


class ChainContext(FlowModel):
    source: str
    destination: Optional[str] = None


class SelectOption(FlowModel):
    label: str
    value: ScalarValue


class HttpParameter(FlowModel):
    name: str
    label: str
    type: str = "text"
    required: bool = False
    description: Optional[str] = None
    placeholder: Optional[str] = None
    default_value: Optional[Any] = Field(default=None, alias="defaultValue")
    options: List[SelectOption] = Field(default_factory=list)
    pattern: Optional[str] = None
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    min_value: Optional[float] = Field(default=None, alias="min")
    max_value: Optional[float] = Field(default=None, alias="max")


class NodeBase(FlowModel):
    id: str
    label: str = ""
    edges: List[Edge] = Field(default_factory=list, alias="nextActions")


class BlockchainNode(NodeBase):
    type: Literal["blockchain"] = "blockchain"
    address: str
    abi: List[Dict[str, Any]] = Field(default_factory=list)
    function_name: str = Field(alias="functionName")
    chains: ChainContext
    amount: Optional[Union[int, float, str]] = None
    params: List[Any] = Field(default_factory=list)


class TransferNode(NodeBase):
    type: Literal["transfer"] = "transfer"
    to: Optional[str] = None
    amount: Optional[float] = None
    chains: ChainContext


class HttpNode(NodeBase):
    type: Literal["http"] = "http"
    endpoint: str
    method: str = DEFAULT_HTTP_METHOD
    params: List[HttpParameter] = Field(default_factory=list)
    body: Dict[str, Any] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)


class DecisionNode(NodeBase):
    type: Literal["decision"] = "decision"
    title: str = ""
    description: Optional[str] = None
    options: List[DecisionOption] = Field(default_factory=list)


class CompletionNode(NodeBase):
    type: Literal["completion"] = "completion"
    message: str = ""
    status: str = "success"


Node = Annotated[
    Union[BlockchainNode, TransferNode, HttpNode, DecisionNode, CompletionNode],
    Field(discriminator="type"),
]


class Flow(FlowModel):
    type: Literal["flow"] = "flow"
    label: str = ""
    initial_node_id: str = Field(default="", alias="initialActionId")
    nodes: List[Node] = Field(default_factory=list, alias="actions")

    def to_document(self) -> Dict[str, Any]:
        """JSON-serializable form using the flow document field names"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExecutionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    node_id: str = Field(alias="nodeId")
    status: ExecutionStatus
    data: Optional[Any] = None
    error: Optional[str] = None
    next_node_id: Optional[str] = Field(default=None, alias="nextNodeId")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
