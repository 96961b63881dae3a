import logging
import typing

import httpx

from .exceptions import ProviderError, RequestCancelledError, RequestTimeoutError
from .interfaces import CancelSignal, HttpResponse, Transport

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_USER_AGENT = "resource-serde/0.1"


def build_http_client(
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
    *,
    transport: typing.Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """
    Creates an :py:class:`httpx.Client` with the defaults every operation shares.

    :param float timeout_seconds: deadline applied to connect, read, write and pool waits.
    :param str user_agent: the ``User-Agent`` header.
    :param Optional[httpx.BaseTransport] transport: a lower-level httpx transport, e.g.
           :py:class:`httpx.MockTransport` in tests.
    """
    return httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        follow_redirects=False,
        headers={"User-Agent": user_agent},
        transport=transport,
    )


class HttpxTransport(Transport):
    _client: httpx.Client
    _owns_client: bool

    def send(
        self, request: httpx.Request, cancel: typing.Optional[CancelSignal] = None
    ) -> HttpResponse:
        if cancel is not None and cancel.cancelled:
            raise RequestCancelledError.from_message("cancelled before the request was sent")
        self.prepare(request)
        try:
            response = self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            logger.debug("%s %s timed out: %s", request.method, request.url, e)
            raise RequestTimeoutError.from_message(f"request timed out ({e})") from e
        except httpx.RequestError as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            raise ProviderError.from_message(f"transport error ({e})") from e

        try:
            chunks = []
            for chunk in response.iter_bytes():
                if cancel is not None and cancel.cancelled:
                    raise RequestCancelledError.from_message(
                        "cancelled while reading the response", http_status=response.status_code
                    )
                chunks.append(chunk)
            if cancel is not None and cancel.cancelled:
                raise RequestCancelledError.from_message(
                    "cancelled while reading the response", http_status=response.status_code
                )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError.from_message(f"response timed out ({e})") from e
        except httpx.RequestError as e:
            raise ProviderError.from_message(f"transport error ({e})") from e
        finally:
            response.close()

        return HttpResponse(
            status_code=response.status_code,
            body=b"".join(chunks),
            headers=dict(response.headers),
        )

    def prepare(self, request: httpx.Request) -> None:
        """
        Applies the client defaults (headers and timeout) that :py:meth:`httpx.Client.send`
        does not apply to a request built outside of the client.
        """
        for name, value in self._client.headers.items():
            request.headers.setdefault(name, value)
        request.extensions.setdefault("timeout", self._client.timeout.as_dict())

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __init__(
        self,
        client: typing.Optional[httpx.Client] = None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        if client is None:
            self._client = build_http_client(timeout_seconds, user_agent)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False
