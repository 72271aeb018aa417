DEFAULT_BASE_URL = "https://api.replicate.com/v1"
API_TOKEN_ENV_VAR = "REPLICATE_API_TOKEN"
BASE_URL_ENV_VAR = "REPLICATE_BASE_URL"
DEFAULT_NETWORK_TIMEOUT_SEC = 120

# Retries on a single HTTP call
DEFAULT_MAX_RETRIES = 5
DEFAULT_RETRY_INTERVAL_SEC = 0.5
DEFAULT_RETRY_JITTER_SEC = 0.1

# Polling a job until it reaches a terminal status
DEFAULT_POLLING_INTERVAL_SEC = 0.25
DEFAULT_POLLING_BACKOFF_BASE_SEC = 0.1

MAX_DATA_URI_SIZE = 10_000_000

EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
PREFER_HEADER = "Prefer"
RETRY_AFTER_HEADER = "Retry-After"

WEBHOOK_ID_HEADER = "webhook-id"
WEBHOOK_TIMESTAMP_HEADER = "webhook-timestamp"
WEBHOOK_SIGNATURE_HEADER = "webhook-signature"

ID_KEY = "id"
INPUT_KEY = "input"
NEXT_KEY = "next"
PREVIOUS_KEY = "previous"
RESULTS_KEY = "results"
STREAM_KEY = "stream"
URLS_KEY = "urls"
WEBHOOK_KEY = "webhook"
WEBHOOK_EVENTS_FILTER_KEY = "webhook_events_filter"
