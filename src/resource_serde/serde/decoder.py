import collections.abc
import json
import math
import typing

from ..exceptions import MalformedResponseError
from ..models import FailureKind, FailureRecord
from ..utils import SentinelType
from .types import NormalizedValue
from .utils import JSONPointer

_TYPE_NAMES: typing.Mapping[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


def _json_type_repr(value: typing.Any) -> str:
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, int):
        return "integer"
    elif isinstance(value, float):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, collections.abc.Mapping):
        return "object"
    elif isinstance(value, collections.abc.Sequence):
        return "array"
    return type(value).__name__


def _reject_constant(name: str) -> typing.NoReturn:
    raise ValueError(f"{name} is not a valid JSON number")


class CoercionError(ValueError):
    pointer: JSONPointer
    message: str

    def __str__(self):
        return f"{self.pointer}: {self.message}"

    def __init__(self, pointer: JSONPointer, message: str):
        super().__init__(pointer, message)
        self.pointer = pointer
        self.message = message


class ResponseDecoder:
    """
    Turns response bytes into a :py:data:`NormalizedValue` tree.

    The tree is built once per response.  Object members keep the three states a
    projection needs to tell apart: a missing key (absent), a key bound to ``None``
    (explicit null), and a key bound to a value.
    """

    def __call__(self, body: bytes) -> NormalizedValue:
        return self.decode(body)

    def decode(self, body: typing.Union[bytes, str]) -> NormalizedValue:
        try:
            if isinstance(body, bytes):
                text = body.decode("utf-8")
            else:
                text = body
            return json.loads(text, parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedResponseError(
                FailureRecord(
                    kind=FailureKind.MALFORMED_RESPONSE,
                    provider_message=f"response body is not valid JSON ({e})",
                )
            ) from e

    def lookup(
        self, value: NormalizedValue, pointer: typing.Union[JSONPointer, str]
    ) -> typing.Union[NormalizedValue, SentinelType]:
        if isinstance(pointer, str):
            pointer = JSONPointer(pointer)
        return pointer.resolve(value)

    def coerce(
        self,
        pointer: JSONPointer,
        typ: typing.Type,
        value: typing.Any,
        allow_null: bool = True,
    ) -> typing.Any:
        """
        Checks a decoded value against the declared semantic type of its target.

        Integer targets accept integral numbers only, so ``3.0`` becomes ``3`` while ``3.5``
        is rejected.  Number targets accept both integers and floats.  ``object`` (or
        :py:data:`typing.Any`) accepts anything.

        :raises CoercionError: if the value does not fit.
        """
        if value is None:
            if allow_null:
                return None
            raise CoercionError(
                pointer, f"null is not allowed where {self.type_repr(typ)} expected"
            )
        if typ is object or typ is typing.Any:
            return value
        if typ is bool:
            if isinstance(value, bool):
                return value
        elif typ is int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, float) and not isinstance(value, bool):
                if math.isfinite(value) and value.is_integer():
                    return int(value)
                raise CoercionError(
                    pointer, f"fractional value {value!r} where integer expected"
                )
        elif typ is float:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
        elif typ is str:
            if isinstance(value, str):
                return value
        elif typ is list:
            if isinstance(value, collections.abc.Sequence) and not isinstance(value, str):
                return list(value)
        elif typ is dict:
            if isinstance(value, collections.abc.Mapping):
                return dict(value)
        else:
            raise TypeError(f"unsupported target type {typ!r}")
        raise CoercionError(
            pointer,
            f"value has type {_json_type_repr(value)} ({json.dumps(value)}) "
            f"where {self.type_repr(typ)} expected",
        )

    def type_repr(self, typ: typing.Type) -> str:
        return _TYPE_NAMES.get(typ, getattr(typ, "__name__", repr(typ)))

    def require_object(self, value: NormalizedValue) -> typing.Mapping[str, NormalizedValue]:
        if not isinstance(value, collections.abc.Mapping):
            raise MalformedResponseError.collected(
                [(JSONPointer(), f"value has type {_json_type_repr(value)} where object expected")]
            )
        return value
