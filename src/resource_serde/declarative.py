import collections.abc
import dataclasses
import string
import typing

from .exceptions import InvalidDeclarationError
from .identity import MAX_SEGMENTS
from .models import (
    Endpoint,
    Operation,
    ResourceAttributeDescriptor,
    ResourceDescriptor,
    Transform,
)
from .serde.utils import JSONPointer
from .utils import UNSPECIFIED, SentinelType

METHODS = frozenset(["GET", "POST", "PUT", "PATCH", "DELETE"])

# operations whose path placeholders are filled from the identifier segments
IDENTIFIED_OPERATIONS = (Operation.READ, Operation.UPDATE, Operation.DELETE)

# Meta keys that differ from the operation name
META_KEYS = {Operation.LIST: "list_"}


@dataclasses.dataclass
class Attr:
    type: typing.Union[SentinelType, typing.Type] = UNSPECIFIED
    name: typing.Union[SentinelType, str] = UNSPECIFIED
    source: typing.Union[SentinelType, None, str, JSONPointer] = UNSPECIFIED
    wire_name: typing.Union[SentinelType, str] = UNSPECIFIED
    transform: typing.Union[SentinelType, Transform] = UNSPECIFIED
    allow_null: typing.Union[SentinelType, bool] = UNSPECIFIED
    required_on_creation: typing.Union[SentinelType, bool] = UNSPECIFIED
    read_only: typing.Union[SentinelType, bool] = UNSPECIFIED
    write_only: typing.Union[SentinelType, bool] = UNSPECIFIED
    body: typing.Union[SentinelType, bool] = UNSPECIFIED


@dataclasses.dataclass
class Meta:
    name: str
    attributes: typing.Sequence[Attr] = ()
    endpoints: typing.Mapping[Operation, Endpoint] = dataclasses.field(default_factory=dict)
    identity: typing.Sequence[str] = ()
    id_source: typing.Optional[str] = None
    beta: bool = False
    file_attribute: typing.Optional[str] = None
    header_attributes: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    override_token_attribute: typing.Optional[str] = None
    local_identity: bool = False
    raw_response: bool = False
    output_attribute: typing.Optional[str] = None


T = typing.TypeVar("T")


def maybe_unspecified(maybe: typing.Union[SentinelType, T], default: T) -> T:
    return typing.cast(T, maybe) if maybe is not UNSPECIFIED else default


def parse_endpoint(declared: typing.Union[str, Endpoint]) -> Endpoint:
    """
    Parses ``"METHOD /path/{placeholder}"`` into an :py:class:`Endpoint`.
    """
    if isinstance(declared, Endpoint):
        return declared
    method, _, path = declared.strip().partition(" ")
    method = method.upper()
    if method not in METHODS:
        raise InvalidDeclarationError(f"unknown HTTP method in endpoint {declared!r}")
    path = path.strip()
    if not path:
        raise InvalidDeclarationError(f"endpoint {declared!r} has no path")
    return Endpoint(method=method, path=path)


def placeholders(template: str) -> typing.List[str]:
    """
    Returns the names of the ``{placeholder}`` fields of a path template in order of
    appearance.
    """
    return [
        field_name
        for _, field_name, _, _ in string.Formatter().parse(template)
        if field_name is not None
    ]


def handle_meta(meta: typing.Type) -> Meta:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    if "name" not in attrs:
        raise InvalidDeclarationError(f"{meta.__qualname__} does not declare a name")

    attributes: typing.Sequence[Attr] = ()
    if "attributes" in attrs:
        _attributes = typing.cast(
            typing.Union[
                typing.Sequence[Attr],
                typing.Mapping[str, Attr],
            ],
            attrs["attributes"],
        )
        if isinstance(_attributes, collections.abc.Mapping):
            attributes = [
                dataclasses.replace(attr, name=name) for name, attr in _attributes.items()
            ]
        else:
            assert isinstance(_attributes, collections.abc.Sequence)
            attributes = _attributes

    endpoints: typing.Dict[Operation, Endpoint] = {}
    for op in Operation:
        declared = attrs.get(META_KEYS.get(op, op.value))
        if declared is not None:
            endpoints[op] = parse_endpoint(declared)

    return Meta(
        name=attrs["name"],
        attributes=attributes,
        endpoints=endpoints,
        identity=tuple(attrs.get("identity", ())),
        id_source=attrs.get("id_source"),
        beta=bool(attrs.get("beta", False)),
        file_attribute=attrs.get("file_attribute"),
        header_attributes=dict(attrs.get("header_attributes", {})),
        override_token_attribute=attrs.get("override_token_attribute"),
        local_identity=bool(attrs.get("local_identity", False)),
        raw_response=bool(attrs.get("raw_response", False)),
        output_attribute=attrs.get("output_attribute"),
    )


def build_attribute_descriptor(attr: Attr) -> ResourceAttributeDescriptor:
    if attr.name is UNSPECIFIED:
        raise InvalidDeclarationError(f"attribute {attr!r} has no name")
    name = typing.cast(str, attr.name)
    if attr.type is UNSPECIFIED:
        raise InvalidDeclarationError(f"attribute {name} has no type")
    write_only = maybe_unspecified(attr.write_only, False)
    read_only = maybe_unspecified(attr.read_only, False)
    if read_only and write_only:
        raise InvalidDeclarationError(f"attribute {name} cannot be both read-only and write-only")

    source: typing.Optional[JSONPointer]
    if attr.source is UNSPECIFIED:
        source = None if write_only else JSONPointer() / name
    elif attr.source is None or isinstance(attr.source, JSONPointer):
        source = attr.source
    else:
        source = JSONPointer(typing.cast(str, attr.source))

    return ResourceAttributeDescriptor(
        type=typing.cast(typing.Type, attr.type),
        name=name,
        source=source,
        wire_name=maybe_unspecified(attr.wire_name, name),
        transform=maybe_unspecified(attr.transform, Transform.PASS_THROUGH),
        allow_null=maybe_unspecified(attr.allow_null, False),
        required_on_creation=maybe_unspecified(attr.required_on_creation, False),
        read_only=read_only,
        write_only=write_only,
        body=maybe_unspecified(attr.body, True),
    )


def validate(descr: ResourceDescriptor) -> None:
    """
    Checks that a descriptor's path templates, identity and special attributes all refer to
    declared attributes.

    :raises InvalidDeclarationError: on the first inconsistency found.
    """
    if len(descr.identity) + 1 > MAX_SEGMENTS:
        raise InvalidDeclarationError(
            f"{descr.name}: identity has {len(descr.identity) + 1} segments, "
            f"at most {MAX_SEGMENTS} are supported"
        )
    for name in descr.identity:
        if name not in descr.attributes:
            raise InvalidDeclarationError(f"{descr.name}: unknown identity attribute {name}")

    for op, endpoint in descr.endpoints.items():
        names = placeholders(endpoint.path)
        if op in IDENTIFIED_OPERATIONS:
            if len(names) != len(descr.identity) + 1:
                raise InvalidDeclarationError(
                    f"{descr.name}: {op.value} path {endpoint.path} must have exactly "
                    f"{len(descr.identity) + 1} placeholders"
                )
            if tuple(names[:-1]) != tuple(descr.identity):
                raise InvalidDeclarationError(
                    f"{descr.name}: {op.value} path {endpoint.path} does not start with "
                    f"the identity attributes"
                )
        else:
            for name in names:
                if name not in descr.attributes:
                    raise InvalidDeclarationError(
                        f"{descr.name}: path placeholder {{{name}}} of {op.value} names "
                        f"no attribute"
                    )

    for role, name in (
        ("file attribute", descr.file_attribute),
        ("override token attribute", descr.override_token_attribute),
        ("output attribute", descr.output_attribute),
    ):
        if name is not None and name not in descr.attributes:
            raise InvalidDeclarationError(f"{descr.name}: unknown {role} {name}")
    for name in descr.header_attributes:
        if name not in descr.attributes:
            raise InvalidDeclarationError(f"{descr.name}: unknown header attribute {name}")

    # a raw body carries no object id to build the identifier from
    if descr.raw_response and not descr.local_identity:
        raise InvalidDeclarationError(f"{descr.name}: raw responses require local_identity")
    if descr.output_attribute is not None and not descr.raw_response:
        raise InvalidDeclarationError(
            f"{descr.name}: an output attribute requires raw_response"
        )


def declare(target: typing.Type) -> ResourceDescriptor:
    """
    Builds a :py:class:`ResourceDescriptor` from a class carrying an inner ``Meta`` class
    (or from the ``Meta`` class itself).

    .. code-block:: python

        class ServiceAccount:
            class Meta:
                name = "project_service_account"
                create = "POST /organization/projects/{project_id}/service_accounts"
                read = "GET /organization/projects/{project_id}/service_accounts/{id}"
                identity = ("project_id",)
                attributes = {
                    "project_id": Attr(str, required_on_creation=True, body=False, source=None),
                    "name": Attr(str, required_on_creation=True),
                }

        SERVICE_ACCOUNT = declare(ServiceAccount)

    :raises InvalidDeclarationError: if the declaration is inconsistent.
    """
    m = handle_meta(vars(target).get("Meta", target))
    descr = ResourceDescriptor(
        name=m.name,
        attributes=[build_attribute_descriptor(attr) for attr in m.attributes],
        endpoints=m.endpoints,
        identity=m.identity,
        id_source=JSONPointer(m.id_source) if m.id_source is not None else None,
        beta=m.beta,
        file_attribute=m.file_attribute,
        header_attributes=m.header_attributes,
        override_token_attribute=m.override_token_attribute,
        local_identity=m.local_identity,
        raw_response=m.raw_response,
        output_attribute=m.output_attribute,
    )
    validate(descr)
    return descr
