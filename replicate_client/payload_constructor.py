from typing import Any, Dict, List, Optional, Union

from .constants import (
    INPUT_KEY,
    PREFER_HEADER,
    STREAM_KEY,
    WEBHOOK_EVENTS_FILTER_KEY,
    WEBHOOK_KEY,
)
from .errors import InvalidInputError
from .file_inputs import transform_file_inputs
from .url_utils import is_valid_webhook_url

WEBHOOK_EVENT_TYPES = ("start", "output", "logs", "completed")


def validate_webhook_options(
    webhook: Optional[str], webhook_events_filter: Optional[List[str]] = None
):
    if webhook is not None and not is_valid_webhook_url(webhook):
        raise InvalidInputError(f"Invalid webhook URL: {webhook}")
    for event in webhook_events_filter or []:
        if event not in WEBHOOK_EVENT_TYPES:
            raise InvalidInputError(
                f"Invalid webhook event {event!r}, expected one of {WEBHOOK_EVENT_TYPES}"
            )


def construct_job_payload(
    input: Any,  # pylint: disable=redefined-builtin
    webhook: Optional[str] = None,
    webhook_events_filter: Optional[List[str]] = None,
    stream: Optional[bool] = None,
    encode_files: bool = True,
    **fields,
) -> Dict[str, Any]:
    """Body of a prediction or training creation request.

    Binary values in ``input`` are inlined as data URIs unless ``encode_files`` is
    False. Fields left as None are omitted.
    """
    validate_webhook_options(webhook, webhook_events_filter)
    payload: Dict[str, Any] = {
        INPUT_KEY: transform_file_inputs(input) if encode_files else input
    }
    if webhook is not None:
        payload[WEBHOOK_KEY] = webhook
    if webhook_events_filter is not None:
        payload[WEBHOOK_EVENTS_FILTER_KEY] = list(webhook_events_filter)
    if stream is not None:
        payload[STREAM_KEY] = stream
    payload.update(
        {key: value for key, value in fields.items() if value is not None}
    )
    return payload


def construct_prefer_wait_header(
    wait: Union[bool, int, None]
) -> Dict[str, str]:
    """``Prefer: wait`` asks the API to hold the response until the job finishes,
    ``Prefer: wait=N`` to hold it for at most N seconds."""
    if wait is None or wait is False:
        return {}
    if wait is True:
        return {PREFER_HEADER: "wait"}
    if isinstance(wait, int) and wait >= 1:
        return {PREFER_HEADER: f"wait={wait}"}
    raise InvalidInputError(
        f"wait must be a boolean or a whole number of seconds >= 1, got {wait!r}"
    )
