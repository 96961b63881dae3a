"""
Classes in :py:mod:`resource_serde.models` describe the values that flow through a single
operation: what is sent (:py:class:`OperationDescriptor`), with which credentials
(:py:class:`CredentialContext`), what comes back for a list (:py:class:`Page`), how a failure
is recorded (:py:class:`FailureRecord`), and how an entity's attributes are declared
(:py:class:`ResourceDescriptor`).
"""

import dataclasses
import enum
import os
import typing
from collections import OrderedDict

from .serde.types import NormalizedValue
from .serde.utils import JSONPointer

QueryValue = typing.Union[str, int, float, bool, typing.Sequence[typing.Union[str, int, float]]]
FormValue = typing.Union[str, int, float, bool, typing.Sequence[typing.Union[str, int, float]]]


class FailureKind(enum.Enum):
    MALFORMED_OPERATION = "MalformedOperation"
    FILE_UNAVAILABLE = "FileUnavailable"
    MALFORMED_RESPONSE = "MalformedResponse"
    NOT_FOUND = "NotFound"
    PERMISSION_DENIED = "PermissionDenied"
    VALIDATION = "Validation"
    RATE_LIMITED = "RateLimited"
    CANCELLED = "Cancelled"
    TIMEOUT = "Timeout"
    PROVIDER_ERROR = "ProviderError"


@dataclasses.dataclass(frozen=True)
class FailureRecord:
    kind: FailureKind
    http_status: typing.Optional[int] = None
    provider_message: str = ""
    provider_type: str = ""
    provider_code: str = ""
    provider_param: str = ""
    hint: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class CredentialContext:
    """
    The authenticated handle a caller lends to the engine for one operation.

    :param str base_url: the provider's base URL, with or without the version segment.
    :param str token: the default bearer token.
    :param Optional[str] organization_id: sent as ``OpenAI-Organization`` when non-empty.
    :param Optional[str] override_token: a per-call token that takes the place of ``token``.
    """

    base_url: str
    token: str
    organization_id: typing.Optional[str] = None
    override_token: typing.Optional[str] = None

    @property
    def effective_token(self) -> str:
        return self.override_token if self.override_token else self.token

    def with_override(self, token: typing.Optional[str]) -> "CredentialContext":
        return dataclasses.replace(self, override_token=token or None)

    def __repr__(self) -> str:
        return (
            f"CredentialContext(base_url={self.base_url!r}, "
            f"organization_id={self.organization_id!r}, "
            f"override={self.override_token is not None})"
        )


@dataclasses.dataclass(frozen=True)
class FileField:
    path: typing.Union[str, "os.PathLike[str]"]
    name: str = "file"
    content_type: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class MultipartBody:
    """
    A ``multipart/form-data`` payload.  The form fields are emitted in the given order and
    the file part always comes last.
    """

    file: FileField
    fields: typing.Sequence[typing.Tuple[str, FormValue]] = ()


Body = typing.Union[None, typing.Mapping[str, typing.Any], bytes, MultipartBody]


@dataclasses.dataclass(frozen=True)
class OperationDescriptor:
    """
    Everything needed to build one outbound request.

    ``path`` is a template whose ``{placeholder}`` fields are substituted, in order of
    appearance, by ``path_params``.  ``nullable`` names the top-level body fields that are
    allowed to go over the wire as an explicit ``null``.
    """

    method: str
    path: str
    path_params: typing.Sequence[str] = ()
    query_params: typing.Sequence[typing.Tuple[str, QueryValue]] = ()
    body: Body = None
    headers: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    beta: bool = False
    nullable: typing.FrozenSet[str] = frozenset()
    raw_response: bool = False

    def with_query(
        self, params: typing.Iterable[typing.Tuple[str, QueryValue]]
    ) -> "OperationDescriptor":
        return dataclasses.replace(self, query_params=tuple(self.query_params) + tuple(params))


@dataclasses.dataclass(frozen=True)
class Page:
    items: typing.Sequence[NormalizedValue]
    has_more: bool = False
    first_id: str = ""
    last_id: str = ""


class Transform(enum.Enum):
    PASS_THROUGH = "pass_through"
    TIMESTAMP = "timestamp"
    JSON_TEXT = "json_text"
    STRING_MAP = "string_map"


class Operation(enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


@dataclasses.dataclass(frozen=True)
class Endpoint:
    method: str
    path: str


class ResourceMemberDescriptor:
    parent: typing.Optional["ResourceDescriptor"] = None
    name: str

    T = typing.TypeVar("T", bound="ResourceMemberDescriptor")

    def bind(self: T, parent: "ResourceDescriptor") -> T:
        self.parent = parent
        return self


class ResourceAttributeDescriptor(ResourceMemberDescriptor):
    type: typing.Type
    source: typing.Optional[JSONPointer]
    wire_name: str
    transform: Transform
    allow_null: bool
    required_on_creation: bool
    read_only: bool
    write_only: bool
    body: bool

    @property
    def writable(self) -> bool:
        return not self.read_only

    @property
    def projected(self) -> bool:
        return self.source is not None and not self.write_only

    def __repr__(self) -> str:
        return f"ResourceAttributeDescriptor({self.name!r}, {self.type.__name__})"

    def __init__(
        self,
        type: typing.Type,
        name: str,
        source: typing.Optional[JSONPointer] = None,
        wire_name: typing.Optional[str] = None,
        transform: Transform = Transform.PASS_THROUGH,
        allow_null: bool = False,
        required_on_creation: bool = False,
        read_only: bool = False,
        write_only: bool = False,
        body: bool = True,
    ):
        self.name = name
        self.type = type
        self.source = source
        self.wire_name = wire_name if wire_name is not None else name
        self.transform = transform
        self.allow_null = allow_null
        self.required_on_creation = required_on_creation
        self.read_only = read_only
        self.write_only = write_only
        self.body = body


class ResourceDescriptor:
    name: str
    attributes: "OrderedDict[str, ResourceAttributeDescriptor]"
    endpoints: typing.Mapping[Operation, Endpoint]
    identity: typing.Sequence[str]
    id_source: JSONPointer
    beta: bool
    file_attribute: typing.Optional[str]
    header_attributes: typing.Mapping[str, str]
    override_token_attribute: typing.Optional[str]
    local_identity: bool
    raw_response: bool
    output_attribute: typing.Optional[str]

    def endpoint(self, operation: Operation) -> typing.Optional[Endpoint]:
        return self.endpoints.get(operation)

    @property
    def projected_attributes(self) -> typing.Sequence[ResourceAttributeDescriptor]:
        return [a for a in self.attributes.values() if a.projected]

    def __repr__(self) -> str:
        return f"ResourceDescriptor({self.name!r})"

    def __init__(
        self,
        name: str,
        attributes: typing.Iterable[ResourceAttributeDescriptor],
        endpoints: typing.Mapping[Operation, Endpoint],
        identity: typing.Sequence[str] = (),
        id_source: typing.Optional[JSONPointer] = None,
        beta: bool = False,
        file_attribute: typing.Optional[str] = None,
        header_attributes: typing.Optional[typing.Mapping[str, str]] = None,
        override_token_attribute: typing.Optional[str] = None,
        local_identity: bool = False,
        raw_response: bool = False,
        output_attribute: typing.Optional[str] = None,
    ):
        self.name = name
        self.attributes = OrderedDict((a.name, a.bind(self)) for a in attributes)
        self.endpoints = dict(endpoints)
        self.identity = tuple(identity)
        self.id_source = id_source if id_source is not None else JSONPointer("/id")
        self.beta = beta
        self.file_attribute = file_attribute
        self.header_attributes = dict(header_attributes or {})
        self.override_token_attribute = override_token_attribute
        self.local_identity = local_identity
        self.raw_response = raw_response
        self.output_attribute = output_attribute
