import logging
import typing

from .config import ProviderSettings
from .interfaces import CancelSignal, Transport
from .models import CredentialContext, OperationDescriptor, Page
from .normalizer import ErrorNormalizer
from .pagination import Cursor, PaginationWalker
from .request import RequestBuilder
from .serde.decoder import ResponseDecoder
from .serde.types import NormalizedValue
from .transport import HttpxTransport


class ProviderClient:
    """
    The authenticated client handle.  It glues the request builder, the transport, the
    response decoder and the error normalizer together for one operation at a time and
    keeps no state between operations besides its collaborators.

    :param CredentialContext credentials: the default credentials for every operation.
    :param Transport transport: performs the network round trip.
    :param Optional[logging.Logger] logger: where requests and failures are logged at DEBUG.
    """

    credentials: CredentialContext
    transport: Transport
    builder: RequestBuilder
    decoder: ResponseDecoder
    normalizer: ErrorNormalizer
    logger: logging.Logger

    def execute(
        self,
        op: OperationDescriptor,
        cancel: typing.Optional[CancelSignal] = None,
        credentials: typing.Optional[CredentialContext] = None,
    ) -> typing.Union[NormalizedValue, bytes]:
        """
        Performs a single operation.

        :return: the decoded response, ``None`` for an empty success body, or the raw body
                 when ``op.raw_response`` is set.
        :raises Failure: the normalized failure for any non-success outcome.
        """
        cred = credentials if credentials is not None else self.credentials
        request = self.builder.build(op, cred)
        self.logger.debug("%s %s", request.method, request.url)
        response = self.transport.send(request, cancel)
        if not response.ok:
            failure = self.normalizer.to_failure(response.status_code, response.body)
            self.logger.debug(
                "%s %s failed: %s (HTTP %d)",
                request.method,
                request.url,
                failure.kind.value,
                response.status_code,
            )
            raise failure
        if op.raw_response:
            return response.body
        if not response.body.strip():
            return None
        return self.decoder.decode(response.body)

    def list_page(
        self,
        op: OperationDescriptor,
        cursor: typing.Optional[Cursor] = None,
        cancel: typing.Optional[CancelSignal] = None,
        credentials: typing.Optional[CredentialContext] = None,
    ) -> Page:
        walker = PaginationWalker(self, self.decoder)
        return walker.list_page(op, cursor, cancel=cancel, credentials=credentials)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "ProviderClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __init__(
        self,
        credentials: CredentialContext,
        transport: Transport,
        builder: typing.Optional[RequestBuilder] = None,
        decoder: typing.Optional[ResponseDecoder] = None,
        normalizer: typing.Optional[ErrorNormalizer] = None,
        logger: typing.Optional[logging.Logger] = None,
    ):
        self.credentials = credentials
        self.transport = transport
        self.builder = builder if builder is not None else RequestBuilder()
        self.decoder = decoder if decoder is not None else ResponseDecoder()
        self.normalizer = normalizer if normalizer is not None else ErrorNormalizer()
        self.logger = logger if logger is not None else logging.getLogger(__name__)


def build_client(
    settings: typing.Optional[ProviderSettings] = None,
    *,
    admin: bool = False,
    transport: typing.Optional[Transport] = None,
    logger: typing.Optional[logging.Logger] = None,
) -> ProviderClient:
    """
    Wires a :py:class:`ProviderClient` from settings.

    :param Optional[ProviderSettings] settings: defaults to reading the environment.
    :param bool admin: authenticate with the admin key.
    :param Optional[Transport] transport: defaults to an :py:class:`HttpxTransport`
           honoring the configured timeout and user agent.
    """
    settings = settings or ProviderSettings()
    if transport is None:
        transport = HttpxTransport(
            timeout_seconds=settings.http_timeout_seconds, user_agent=settings.user_agent
        )
    return ProviderClient(
        credentials=settings.credential_context(admin=admin),
        transport=transport,
        logger=logger,
    )
