import json
import urllib.parse
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .async_utils import build_form_data
from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_NETWORK_TIMEOUT_SEC,
    DEFAULT_RETRY_INTERVAL_SEC,
    DEFAULT_RETRY_JITTER_SEC,
)
from .errors import NoAPIToken, ReplicateAPIError, ReplicateTransportError
from .logger import logger
from .retry_strategy import (
    RETRYABLE_EXCEPTIONS,
    RetryStrategy,
    with_automatic_retries,
)


class AiohttpFetch:
    """Default transport: one lazily opened ``aiohttp.ClientSession``.

    Called as ``fetch(method, url, headers=..., data=..., stream=...)`` and returns
    the unread ``aiohttp.ClientResponse``. The caller releases it.
    """

    def __init__(self, timeout: float = DEFAULT_NETWORK_TIMEOUT_SEC):
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __call__(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        data: Any = None,
        stream: bool = False,
    ) -> aiohttp.ClientResponse:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        if stream:
            # Event streams stay open for as long as the job runs.
            timeout = aiohttp.ClientTimeout(total=None, connect=self.timeout)
        else:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
        return await self._session.request(
            method, url, headers=headers, data=data, timeout=timeout
        )

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()


class Connection:
    """Wrapper of HTTP requests to the Replicate API.

    Every request goes through :func:`with_automatic_retries`, and non-2xx
    responses are raised as :class:`ReplicateAPIError`.
    """

    def __init__(
        self,
        api_token: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        user_agent: Optional[str] = None,
        fetch=None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_interval: float = DEFAULT_RETRY_INTERVAL_SEC,
        retry_jitter: float = DEFAULT_RETRY_JITTER_SEC,
    ):
        if not api_token:
            raise NoAPIToken()
        self.api_token = api_token
        self.base_url = base_url
        self.user_agent = user_agent
        self._owns_fetch = fetch is None
        self.fetch = fetch if fetch is not None else AiohttpFetch()
        self.max_retries = max_retries
        self.retry_interval = retry_interval
        self.retry_jitter = retry_jitter

    def __repr__(self):
        return f"Connection(api_token='{self.api_token}', base_url='{self.base_url}')"

    def __eq__(self, other):
        return (
            self.api_token == other.api_token
            and self.base_url == other.base_url
        )

    def url_for(self, route: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Resolves a route against the base URL.

        Absolute URLs, such as pagination cursors and stream links, are used as is.
        """
        if route.startswith(("http://", "https://")):
            url = route
        else:
            url = f"{self.base_url.rstrip('/')}/{route.lstrip('/')}"
        if params:
            separator = "&" if "?" in url else "?"
            url += separator + urllib.parse.urlencode(params)
        return url

    def headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.api_token}"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        headers.update(extra or {})
        return headers

    def retry_strategy(self, method: str) -> RetryStrategy:
        return RetryStrategy.for_method(
            method,
            max_retries=self.max_retries,
            interval=self.retry_interval,
            jitter=self.retry_jitter,
        )

    async def request(
        self,
        method: str,
        route: str,
        payload: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        stream: bool = False,
    ):
        """Sends a request and returns the unread response.

        :param method: HTTP verb
        :param route: path relative to the base URL, or an absolute URL
        :param payload: a dict sent as JSON, a sequence of
            :class:`~replicate_client.async_utils.FileFormField` sent as
            multipart form data, or a string sent as is
        :param params: query string parameters
        :param headers: extra headers, overriding the defaults
        :param stream: keep the connection open without a total timeout
        :return: the response, already checked for a 2xx status
        """
        method = method.upper()
        url = self.url_for(route, params)
        request_headers = self.headers()
        if isinstance(payload, dict):
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})

        def body():
            if payload is None or isinstance(payload, (str, bytes)):
                return payload
            if isinstance(payload, dict):
                return json.dumps(payload)
            return build_form_data(payload)

        async def send():
            return await self.fetch(
                method, url, headers=request_headers, data=body(), stream=stream
            )

        logger.info("Make request to %s", url)
        try:
            response = await with_automatic_retries(
                send, self.retry_strategy(method)
            )
        except RETRYABLE_EXCEPTIONS as e:
            raise ReplicateTransportError(url, method, e) from e
        logger.info("API request has response code %s", response.status)

        if response.status >= 400:
            await self.handle_bad_response(url, method, response)
        return response

    async def make_request(
        self,
        payload: Any,
        route: str,
        method: str = "POST",
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        return_raw_response: bool = False,
    ):
        """Makes a request to the API and decodes the JSON body.

        :param payload: given payload, or None for no body
        :param route: route for the request
        :param method: HTTP verb
        :param return_raw_response: return the unread response object instead
        :return: response JSON, or None for 204 No Content
        """
        response = await self.request(
            method, route, payload=payload, params=params, headers=headers
        )
        if return_raw_response:
            return response
        try:
            if response.status == 204:
                return None
            return await response.json(content_type=None)
        finally:
            response.release()

    async def get(self, route: str, params: Optional[Dict[str, Any]] = None):
        return await self.make_request(None, route, method="GET", params=params)

    async def post(self, payload: Any, route: str, headers=None):
        return await self.make_request(
            payload, route, method="POST", headers=headers
        )

    async def patch(self, payload: Any, route: str):
        return await self.make_request(payload, route, method="PATCH")

    async def delete(self, route: str):
        return await self.make_request(None, route, method="DELETE")

    async def handle_bad_response(self, url: str, method: str, response):
        try:
            detail = await response.text()
        finally:
            response.release()
        raise ReplicateAPIError(
            url,
            method,
            response.status,
            reason=response.reason,
            detail=detail,
            headers=response.headers,
        )

    async def close(self):
        if self._owns_fetch:
            await self.fetch.close()
