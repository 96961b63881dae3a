import collections.abc
import typing

from .exceptions import MalformedResponseError
from .models import ResourceAttributeDescriptor, Transform
from .serde.decoder import CoercionError, ResponseDecoder
from .serde.types import NormalizedValue
from .serde.utils import JSONPointer, compact_json, format_unix_timestamp
from .utils import ABSENT

AttributeSet = typing.MutableMapping[str, typing.Any]


class StateProjector:
    """
    Writes a decoded response onto an attribute set.

    For every declared attribute the source member is looked up in the response:

    * absent: the attribute is left as it is, so several response shapes can be laid
      over the same attribute set one after another;
    * ``null``: the attribute is cleared;
    * anything else: the attribute's transform is applied and the result is written.

    Conversion problems are collected for all attributes and raised together, after every
    well-formed attribute has been written.
    """

    decoder: ResponseDecoder

    def project(
        self,
        value: NormalizedValue,
        schema: typing.Iterable[ResourceAttributeDescriptor],
        attributes: typing.Optional[AttributeSet] = None,
    ) -> AttributeSet:
        if attributes is None:
            attributes = {}
        errors: typing.List[typing.Tuple[JSONPointer, str]] = []
        for descr in schema:
            if not descr.projected:
                continue
            source = typing.cast(JSONPointer, descr.source)
            v = source.resolve(value)
            if v is ABSENT:
                continue
            if v is None:
                attributes.pop(descr.name, None)
                continue
            try:
                attributes[descr.name] = self.transform(descr, source, v)
            except CoercionError as e:
                errors.append((e.pointer, e.message))
        if errors:
            raise MalformedResponseError.collected(errors)
        return attributes

    def __call__(
        self,
        value: NormalizedValue,
        schema: typing.Iterable[ResourceAttributeDescriptor],
        attributes: typing.Optional[AttributeSet] = None,
    ) -> AttributeSet:
        return self.project(value, schema, attributes)

    def transform(
        self, descr: ResourceAttributeDescriptor, pointer: JSONPointer, value: typing.Any
    ) -> typing.Any:
        if descr.transform is Transform.PASS_THROUGH:
            return self.decoder.coerce(pointer, descr.type, value, allow_null=False)
        elif descr.transform is Transform.TIMESTAMP:
            seconds = self.decoder.coerce(pointer, float, value, allow_null=False)
            try:
                return format_unix_timestamp(seconds)
            except (OverflowError, OSError, ValueError) as e:
                raise CoercionError(pointer, f"{value!r} is not a valid timestamp ({e})")
        elif descr.transform is Transform.JSON_TEXT:
            return compact_json(value)
        elif descr.transform is Transform.STRING_MAP:
            mapping = self.decoder.coerce(pointer, dict, value, allow_null=False)
            return {
                k: (v if isinstance(v, str) else compact_json(v)) for k, v in mapping.items()
            }
        raise ValueError(f"unknown transform {descr.transform!r}")

    def __init__(self, decoder: typing.Optional[ResponseDecoder] = None):
        self.decoder = decoder if decoder is not None else ResponseDecoder()


def project(
    value: NormalizedValue,
    schema: typing.Iterable[ResourceAttributeDescriptor],
    attributes: typing.Optional[AttributeSet] = None,
) -> AttributeSet:
    return StateProjector().project(value, schema, attributes)


def flatten_items(
    projector: StateProjector,
    items: typing.Iterable[NormalizedValue],
    schema: typing.Sequence[ResourceAttributeDescriptor],
) -> typing.List[AttributeSet]:
    """
    Projects every item of a list page onto a fresh attribute set.
    """
    result = []
    for item in items:
        if not isinstance(item, collections.abc.Mapping):
            raise MalformedResponseError.collected(
                [(JSONPointer(), "list item is not an object")]
            )
        result.append(projector.project(item, schema))
    return result
