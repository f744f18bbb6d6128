"""Centralized constants"""

# Redis TTLs
REDIS_KEY_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 days

# Limits
MAX_NODES_PER_FLOW = 1000

# HTTP capability
DEFAULT_HTTP_TIMEOUT_SECONDS = 30
DEFAULT_HTTP_METHOD = "POST"
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Retry Configuration
MAX_RETRY_ATTEMPTS = 3
INITIAL_RETRY_DELAY_SECONDS = 1
MAX_RETRY_DELAY_SECONDS = 60

# Retryable HTTP Status Codes
RETRYABLE_HTTP_STATUS_CODES = {500, 502, 503, 504, 408, 429}

# Flow document vocabularies
COMPLETION_STATUSES = {"success", "error", "info"}

HTTP_PARAMETER_TYPES = {
    "text", "number", "boolean", "email", "url", "datetime", "textarea", "select", "radio"
}
CHOICE_PARAMETER_TYPES = {"select", "radio"}

# Supported chain names
VALID_CHAINS = ("fuji", "avalanche", "alfajores", "celo", "monad-testnet")

# Context keys written by the executor
CONTEXT_LAST_RESULT = "lastResult"
CONTEXT_LAST_ACTION_ID = "lastActionId"
CONTEXT_LAST_ERROR = "lastError"
CONTEXT_USER_CHOICE = "userChoice"
