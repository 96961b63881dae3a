import abc
import typing

from .models import FailureKind, FailureRecord
from .serde.utils import JSONPointer, english_enumerate


class ResourceSerdeException(Exception, metaclass=abc.ABCMeta):
    pass


class InvalidDeclarationError(ResourceSerdeException):
    message: str

    def __str__(self):
        return self.message

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIdentityError(ResourceSerdeException):
    identity: typing.Union[str, typing.Sequence[str]]
    detail: str

    @property
    def message(self) -> str:
        return f"invalid identifier {self.identity!r}: {self.detail}"

    def __str__(self):
        return self.message

    def __init__(self, identity: typing.Union[str, typing.Sequence[str]], detail: str):
        super().__init__(identity, detail)
        self.identity = identity
        self.detail = detail


class Failure(ResourceSerdeException):
    """
    The base of every failure the provider taxonomy knows of.  A :py:class:`Failure` is
    terminal: the engine never retries it and hands the :py:class:`FailureRecord` to the caller.
    """

    kind: typing.ClassVar[FailureKind]
    record: FailureRecord

    @property
    def message(self) -> str:
        buf = [self.record.provider_message or self.kind.value]
        if self.record.provider_param:
            buf.append(f" (param: {self.record.provider_param})")
        if self.record.http_status is not None:
            buf.append(f" [HTTP {self.record.http_status}]")
        if self.record.hint:
            buf.append(f"; {self.record.hint}")
        return "".join(buf)

    def __str__(self):
        return self.message

    @classmethod
    def from_message(
        cls,
        message: str,
        http_status: typing.Optional[int] = None,
        hint: typing.Optional[str] = None,
    ) -> "Failure":
        return cls(
            FailureRecord(
                kind=cls.kind, http_status=http_status, provider_message=message, hint=hint
            )
        )

    def __init__(self, record: FailureRecord):
        super().__init__(record)
        self.record = record


class MalformedOperationError(Failure):
    kind = FailureKind.MALFORMED_OPERATION

    @classmethod
    def missing(cls, what: str, names: typing.Iterable[str]) -> "MalformedOperationError":
        return typing.cast(
            MalformedOperationError,
            cls.from_message(f"missing {what}: {english_enumerate(names)}"),
        )


class FileUnavailableError(Failure):
    kind = FailureKind.FILE_UNAVAILABLE


class MalformedResponseError(Failure):
    kind = FailureKind.MALFORMED_RESPONSE
    errors: typing.Sequence[typing.Tuple[JSONPointer, str]]

    @classmethod
    def collected(
        cls, errors: typing.Sequence[typing.Tuple[JSONPointer, str]]
    ) -> "MalformedResponseError":
        summary = "; ".join(f"{pointer}: {message}" for pointer, message in errors)
        return cls(
            FailureRecord(kind=cls.kind, provider_message=f"malformed response ({summary})"),
            errors=errors,
        )

    def __init__(
        self,
        record: FailureRecord,
        errors: typing.Sequence[typing.Tuple[JSONPointer, str]] = (),
    ):
        super().__init__(record)
        self.errors = errors


class NotFoundError(Failure):
    kind = FailureKind.NOT_FOUND


class PermissionDeniedError(Failure):
    kind = FailureKind.PERMISSION_DENIED


class ValidationError(Failure):
    kind = FailureKind.VALIDATION


class RateLimitedError(Failure):
    kind = FailureKind.RATE_LIMITED


class RequestCancelledError(Failure):
    kind = FailureKind.CANCELLED


class RequestTimeoutError(Failure):
    kind = FailureKind.TIMEOUT


class ProviderError(Failure):
    kind = FailureKind.PROVIDER_ERROR
    body: bytes

    def __init__(self, record: FailureRecord, body: bytes = b""):
        super().__init__(record)
        self.body = body


FAILURE_CLASSES: typing.Mapping[FailureKind, typing.Type[Failure]] = {
    c.kind: c
    for c in (
        MalformedOperationError,
        FileUnavailableError,
        MalformedResponseError,
        NotFoundError,
        PermissionDeniedError,
        ValidationError,
        RateLimitedError,
        RequestCancelledError,
        RequestTimeoutError,
        ProviderError,
    )
}


def failure_for(record: FailureRecord) -> Failure:
    return FAILURE_CLASSES[record.kind](record)


class PartialWriteError(ResourceSerdeException):
    """
    Raised when an object was created on the provider but its response could not be
    projected in full.  The identifier is kept so that the caller can hold on to the
    object and only retry the read.
    """

    identifier: str
    attributes: typing.Mapping[str, typing.Any]

    @property
    def message(self) -> str:
        return (
            f"{self.identifier} was written but its state could not be read back "
            f"({self.__cause__!s})"
        )

    def __str__(self):
        return self.message

    def __init__(self, identifier: str, attributes: typing.Mapping[str, typing.Any]):
        super().__init__(identifier)
        self.identifier = identifier
        self.attributes = attributes
