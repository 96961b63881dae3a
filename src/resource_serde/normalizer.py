import collections.abc
import json
import typing

from .exceptions import Failure, ProviderError, failure_for
from .models import FailureKind, FailureRecord

PERMISSION_HINT = (
    "this operation requires an elevated credential; "
    "use an admin API key or a key that carries the missing scopes"
)

PERMISSION_ERROR_TYPES: typing.FrozenSet[str] = frozenset(
    [
        "insufficient_permission",
        "insufficient_permissions",
        "insufficient_scope",
        "permission_denied",
        "permission_error",
    ]
)


class ErrorEnvelope(typing.NamedTuple):
    message: str
    type: str
    param: str
    code: str


def _as_text(value: typing.Any) -> str:
    if value is None:
        return ""
    elif isinstance(value, str):
        return value
    return json.dumps(value)


def parse_error_envelope(body: bytes) -> typing.Optional[ErrorEnvelope]:
    """
    Parses the provider's ``{"error": {"message", "type", "param", "code"}}`` envelope.

    :return: the envelope, or ``None`` if ``body`` is not shaped like one.
    """
    try:
        decoded = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(decoded, collections.abc.Mapping):
        return None
    error = decoded.get("error")
    if not isinstance(error, collections.abc.Mapping):
        return None
    return ErrorEnvelope(
        message=_as_text(error.get("message")),
        type=_as_text(error.get("type")),
        param=_as_text(error.get("param")),
        code=_as_text(error.get("code")),
    )


class ErrorNormalizer:
    """
    Classifies a non-success response into a :py:class:`FailureRecord`.

    The message is extracted first so that it is available however coarse the resulting
    kind is; the kind is decided by the status code first and by structured envelope
    fields second, never by the wording of the message.
    """

    permission_hint: str = PERMISSION_HINT

    def classify(self, http_status: int, body: bytes) -> FailureRecord:
        envelope = parse_error_envelope(body)
        if envelope is not None:
            message, type_, param, code = envelope
        else:
            message, type_, param, code = body.decode("utf-8", errors="replace"), "", "", ""

        kind = self._kind(http_status, envelope)
        return FailureRecord(
            kind=kind,
            http_status=http_status,
            provider_message=message,
            provider_type=type_,
            provider_code=code,
            provider_param=param,
            hint=self.permission_hint if kind is FailureKind.PERMISSION_DENIED else None,
        )

    def _kind(self, http_status: int, envelope: typing.Optional[ErrorEnvelope]) -> FailureKind:
        if http_status == 404:
            return FailureKind.NOT_FOUND
        elif http_status == 403:
            return FailureKind.PERMISSION_DENIED
        elif envelope is not None and (
            envelope.type in PERMISSION_ERROR_TYPES or envelope.code in PERMISSION_ERROR_TYPES
        ):
            return FailureKind.PERMISSION_DENIED
        elif http_status == 429:
            return FailureKind.RATE_LIMITED
        elif http_status in (400, 422) and envelope is not None:
            return FailureKind.VALIDATION
        return FailureKind.PROVIDER_ERROR

    def to_failure(self, http_status: int, body: bytes) -> Failure:
        record = self.classify(http_status, body)
        if record.kind is FailureKind.PROVIDER_ERROR:
            return ProviderError(record, body=body)
        return failure_for(record)

    def __call__(self, http_status: int, body: bytes) -> FailureRecord:
        return self.classify(http_status, body)


def classify(http_status: int, body: bytes) -> FailureRecord:
    return ErrorNormalizer().classify(http_status, body)
