import collections.abc
import typing

from ...utils import ABSENT, SentinelType


def _escape(component: str) -> str:
    return component.replace("~", "~0").replace("/", "~1")


def _unescape(component: str) -> str:
    return component.replace("~1", "/").replace("~0", "~")


class JSONPointer:
    """
    An RFC 6901 JSON pointer.  Pointers are immutable; ``/`` and indexing
    yield a new pointer that refers to a child of the original one.

    .. code-block:: python

       ptr = JSONPointer("/usage") / "total_tokens"
       assert str(ptr) == "/usage/total_tokens"
       assert ptr.resolve({"usage": {"total_tokens": 10}}) == 10
    """

    components: typing.Tuple[str, ...]

    def __truediv__(self, component: typing.Union[str, int]) -> "JSONPointer":
        return JSONPointer(self.components + (str(component),))

    def __getitem__(self, index: int) -> "JSONPointer":
        return self / index

    def __str__(self) -> str:
        if not self.components:
            return "/"
        return "".join("/" + _escape(c) for c in self.components)

    def __repr__(self) -> str:
        return f"JSONPointer({str(self)!r})"

    def __eq__(self, other: typing.Any) -> bool:
        if not isinstance(other, JSONPointer):
            return NotImplemented
        return self.components == other.components

    def __hash__(self) -> int:
        return hash(self.components)

    @property
    def is_root(self) -> bool:
        return not self.components

    def resolve(self, value: typing.Any) -> typing.Union[typing.Any, SentinelType]:
        """
        Looks up the value the pointer refers to.

        :param Any value: a decoded JSON document.
        :return: the referenced value, ``None`` when the member is present but null,
                 or :py:data:`ABSENT` when any of the path components does not exist.
        """
        for component in self.components:
            if isinstance(value, collections.abc.Mapping):
                if component not in value:
                    return ABSENT
                value = value[component]
            elif isinstance(value, collections.abc.Sequence) and not isinstance(value, str):
                try:
                    index = int(component)
                except ValueError:
                    return ABSENT
                if index < 0 or index >= len(value):
                    return ABSENT
                value = value[index]
            else:
                return ABSENT
        return value

    def __init__(self, path: typing.Union[str, typing.Iterable[str]] = ()):
        if isinstance(path, str):
            if path in ("", "/"):
                self.components = ()
            elif not path.startswith("/"):
                raise ValueError(f"JSON pointer must start with a slash: {path}")
            else:
                self.components = tuple(_unescape(c) for c in path[1:].split("/"))
        else:
            self.components = tuple(path)
