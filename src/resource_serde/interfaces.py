"""
This module contains the interfaces of the collaborators the engine relies on
but does not implement itself: the transport that performs the network round trip,
and the cancellation signal a caller hands in alongside a request.

"""
import abc
import dataclasses
import threading
import typing

import httpx


@dataclasses.dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: bytes
    headers: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        for k, v in self.headers.items():
            if k.lower() == "content-type":
                return v.split(";", 1)[0].strip().lower()
        return ""


class CancelSignal:
    """
    A one-shot flag that a caller fires to abandon an operation in flight.
    Firing it is thread-safe and idempotent.
    """

    _event: threading.Event

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __init__(self):
        self._event = threading.Event()


class Transport(metaclass=abc.ABCMeta):
    """
    A :py:class:`Transport` executes a fully formed request.  It performs exactly one
    round trip per call and never retries.
    """

    @abc.abstractmethod
    def send(
        self, request: httpx.Request, cancel: typing.Optional[CancelSignal] = None
    ) -> HttpResponse:
        """
        Sends the request and reads the whole response.

        :param httpx.Request request: the request built by :py:class:`RequestBuilder`.
        :param Optional[CancelSignal] cancel: a signal the transport must honor while the
               request is in flight.
        :return: the raw response.
        :raises RequestCancelledError: if ``cancel`` fired before the response was complete.
        :raises RequestTimeoutError: if the transport-level deadline passed.
        """
        ...  # pragma: nocover

    def close(self) -> None:
        """
        Releases any connection the transport holds.
        """
