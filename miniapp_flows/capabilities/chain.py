"""Simulated chain client returning synthetic transaction hashes."""

import logging
import secrets
from typing import Any, Dict, List, Optional
from miniapp_shared.types import ChainContext


class SimulatedChainClient:
    """Stands in for wallet signing and submission, which live outside this library"""

    def send_blockchain_call(
        self,
        address: str,
        function_name: str,
        params: List[Any],
        chains: ChainContext,
        amount: Optional[Any] = None
    ) -> Dict[str, Any]:
        logging.info("Simulating contract call", extra={
            "address": address,
            "function_name": function_name,
            "chain": chains.source,
            "param_count": len(params)
        })
        return {"txHandle": self._tx_hash()}

    def send_transfer(self, to: Optional[str], amount: Optional[float], chains: ChainContext) -> Dict[str, Any]:
        logging.info("Simulating transfer", extra={
            "to": to,
            "amount": amount,
            "chain": chains.source
        })
        return {"txHandle": self._tx_hash()}

    def _tx_hash(self) -> str:
        return "0x" + secrets.token_hex(4)
