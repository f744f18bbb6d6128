"""HTTP capability backed by requests."""

from typing import Any, Dict, Optional
import requests
from requests.exceptions import RequestException, Timeout, ConnectionError
from miniapp_shared.constants import (
    CORRELATION_ID_HEADER,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    RETRYABLE_HTTP_STATUS_CODES,
)
from miniapp_shared.exceptions import CapabilityError, StepError
from miniapp_shared.logging_config import get_correlation_id


class RequestsHttpClient:
    
    def __init__(self, timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
    
    def close(self) -> None:
        self.session.close()
    
    def send_http_request(self, url: str, method: str, body: Dict[str, Any], headers: Dict[str, str]) -> Any:
        request_headers = {"Content-Type": "application/json", **headers}
        correlation_id = get_correlation_id()
        if correlation_id:
            request_headers.setdefault(CORRELATION_ID_HEADER, correlation_id)
        
        method = method.upper()
        try:
            response = self.session.request(
                method,
                url,
                headers=request_headers,
                params=body if method == "GET" else None,
                json=None if method == "GET" else body,
                timeout=self.timeout
            )
            
            # Check for retryable HTTP errors
            if response.status_code in RETRYABLE_HTTP_STATUS_CODES:
                retry_after = None
                if response.status_code == 429:
                    # Retry-After can also be an HTTP date; only seconds are honoured
                    retry_after_header = response.headers.get("Retry-After")
                    if retry_after_header and retry_after_header.isdigit():
                        retry_after = int(retry_after_header)
                
                raise CapabilityError(StepError(
                    error_type="HTTP_ERROR",
                    error_message=f"HTTP {response.status_code}: {response.reason}",
                    http_status_code=response.status_code,
                    is_retryable=True,
                    retry_after_seconds=retry_after,
                    context={"url": url, "method": method}
                ))
            
            response.raise_for_status()
            
            if "application/json" in response.headers.get("content-type", ""):
                return response.json()
            return {"text": response.text, "status_code": response.status_code}
        
        except (Timeout, ConnectionError) as e:
            # Network errors are retryable
            raise CapabilityError(StepError(
                error_type="NETWORK_ERROR",
                error_message=f"Network error: {str(e)}",
                is_retryable=True,
                context={"url": url, "error_class": type(e).__name__}
            ))
        
        except RequestException as e:
            # Other request errors (4xx client errors) are not retryable
            status_code = e.response.status_code if e.response is not None else None
            raise CapabilityError(StepError(
                error_type="REQUEST_ERROR",
                error_message=f"Request failed: {str(e)}",
                http_status_code=status_code,
                is_retryable=False,
                context={"url": url}
            ))
