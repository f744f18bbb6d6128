"""Capability interfaces the executor delegates external work to."""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol
from miniapp_shared.types import ChainContext


class ChainClient(Protocol):
    def send_blockchain_call(
        self,
        address: str,
        function_name: str,
        params: List[Any],
        chains: ChainContext,
        amount: Optional[Any] = None
    ) -> Dict[str, Any]:
        ...

    def send_transfer(self, to: Optional[str], amount: Optional[float], chains: ChainContext) -> Dict[str, Any]:
        ...


class HttpClient(Protocol):
    def send_http_request(
        self,
        url: str,
        method: str,
        body: Dict[str, Any],
        headers: Dict[str, str]
    ) -> Any:
        ...


def _default_chain() -> ChainClient:
    from miniapp_flows.capabilities.chain import SimulatedChainClient
    return SimulatedChainClient()


@lru_cache(maxsize=None)
def _default_http() -> HttpClient:
    """One pooled client shared by every executor that does not bring its own"""
    from miniapp_flows.capabilities.http import RequestsHttpClient
    return RequestsHttpClient()


@dataclass
class Capabilities:
    """External collaborators used by blockchain, transfer and http steps"""
    chain: ChainClient = field(default_factory=_default_chain)
    http: HttpClient = field(default_factory=_default_http)
