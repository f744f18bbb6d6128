"""
Redis store for flow definitions and run snapshots.
"""

import json
import os
from typing import Optional, Dict, Any
import redis
from miniapp_flows.capabilities.registry import Capabilities
from miniapp_flows.engine.executor import FlowExecutor
from miniapp_shared.constants import REDIS_KEY_TTL_SECONDS
from miniapp_shared.types import Flow


class RedisStore:
    """Persists flows and executor snapshots so a run can resume in another process"""
    
    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        if client is not None:
            self.client = client
        else:
            url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
            self.client = redis.Redis.from_url(url, decode_responses=False)
    
    def store_flow(self, flow_id: str, flow: Flow) -> None:
        key = f"flow:{flow_id}:definition"
        self.client.set(key, json.dumps(flow.to_document()))
        self.client.expire(key, REDIS_KEY_TTL_SECONDS)
    
    def get_flow(self, flow_id: str) -> Optional[Flow]:
        data = self.client.get(f"flow:{flow_id}:definition")
        if data:
            return Flow.model_validate(json.loads(data))
        return None
    
    def store_run(self, executor: FlowExecutor) -> None:
        key = f"run:{executor.run_id}:snapshot"
        self.client.set(key, json.dumps(executor.snapshot(), default=str))
        self.client.expire(key, REDIS_KEY_TTL_SECONDS)
    
    def get_run_snapshot(self, run_id: str) -> Optional[Dict[str, Any]]:
        data = self.client.get(f"run:{run_id}:snapshot")
        if data:
            return json.loads(data)
        return None
    
    def load_run(self, run_id: str, capabilities: Optional[Capabilities] = None) -> Optional[FlowExecutor]:
        snapshot = self.get_run_snapshot(run_id)
        if snapshot is None:
            return None
        return FlowExecutor.from_snapshot(snapshot, capabilities=capabilities)
    
    def delete_run(self, run_id: str) -> None:
        self.client.delete(f"run:{run_id}:snapshot")
