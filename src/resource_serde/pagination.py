import collections.abc
import dataclasses
import typing

from .exceptions import MalformedOperationError, MalformedResponseError
from .interfaces import CancelSignal
from .models import CredentialContext, OperationDescriptor, Page, QueryValue
from .serde.decoder import CoercionError, ResponseDecoder
from .serde.types import NormalizedValue
from .serde.utils import JSONPointer
from .utils import ABSENT

ORDERS = ("asc", "desc")


@dataclasses.dataclass(frozen=True)
class Cursor:
    """
    Cursor parameters for one page.  Fields left at ``None`` (or empty) are not sent at
    all, so the provider's own defaults apply.
    """

    limit: typing.Optional[int] = None
    after: typing.Optional[str] = None
    before: typing.Optional[str] = None
    order: typing.Optional[str] = None

    def query_params(self) -> typing.List[typing.Tuple[str, QueryValue]]:
        params: typing.List[typing.Tuple[str, QueryValue]] = []
        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
                raise MalformedOperationError.from_message(
                    f"limit must be a positive integer, got {self.limit!r}"
                )
            params.append(("limit", self.limit))
        if self.after:
            params.append(("after", self.after))
        if self.before:
            params.append(("before", self.before))
        if self.order:
            if self.order not in ORDERS:
                raise MalformedOperationError.from_message(
                    f'order must be "asc" or "desc", got {self.order!r}'
                )
            params.append(("order", self.order))
        return params


class OperationExecutor(typing.Protocol):
    def execute(
        self,
        op: OperationDescriptor,
        cancel: typing.Optional[CancelSignal] = None,
        credentials: typing.Optional[CredentialContext] = None,
    ) -> typing.Any:
        ...  # pragma: nocover


class PaginationWalker:
    """
    Fetches one page of a cursor-paginated list endpoint per call.
    """

    executor: OperationExecutor
    decoder: ResponseDecoder

    def list_page(
        self,
        op: OperationDescriptor,
        cursor: typing.Optional[Cursor] = None,
        cancel: typing.Optional[CancelSignal] = None,
        credentials: typing.Optional[CredentialContext] = None,
    ) -> Page:
        cursor = cursor if cursor is not None else Cursor()
        value = self.executor.execute(
            op.with_query(cursor.query_params()), cancel=cancel, credentials=credentials
        )
        return self.page_from_envelope(value)

    def page_from_envelope(self, value: NormalizedValue) -> Page:
        envelope = self.decoder.require_object(value)
        root = JSONPointer()
        errors: typing.List[typing.Tuple[JSONPointer, str]] = []

        def field(name: str, typ: typing.Type, default: typing.Any) -> typing.Any:
            v = envelope.get(name, ABSENT)
            if v is ABSENT or v is None:
                return default
            try:
                return self.decoder.coerce(root / name, typ, v)
            except CoercionError as e:
                errors.append((e.pointer, e.message))
                return default

        items = field("data", list, [])
        has_more = field("has_more", bool, False)
        first_id = field("first_id", str, "")
        last_id = field("last_id", str, "")
        if errors:
            raise MalformedResponseError.collected(errors)
        return Page(items=items, has_more=has_more, first_id=first_id, last_id=last_id)

    def iter_pages(
        self,
        op: OperationDescriptor,
        cursor: typing.Optional[Cursor] = None,
        cancel: typing.Optional[CancelSignal] = None,
        credentials: typing.Optional[CredentialContext] = None,
    ) -> typing.Iterator[Page]:
        """
        Follows ``has_more`` lazily.  Every step is a single :py:meth:`list_page` call,
        so the caller decides how far to go and can stop between pages.

        A walk that starts from a ``before`` cursor keeps going backwards, stepping with
        ``before=<first id>``; any other walk steps forwards with ``after=<last id>``.
        """
        cursor = cursor if cursor is not None else Cursor()
        backwards = bool(cursor.before)
        seen: typing.Set[str] = set()
        while True:
            page = self.list_page(op, cursor, cancel=cancel, credentials=credentials)
            yield page
            if not page.has_more:
                return
            if backwards:
                next_id = page.first_id or _item_id(page, 0)
            else:
                next_id = page.last_id or _item_id(page, -1)
            if not next_id or next_id in seen:
                return
            seen.add(next_id)
            if backwards:
                cursor = dataclasses.replace(cursor, before=next_id, after=None)
            else:
                cursor = dataclasses.replace(cursor, after=next_id, before=None)

    def __init__(
        self, executor: OperationExecutor, decoder: typing.Optional[ResponseDecoder] = None
    ):
        self.executor = executor
        self.decoder = decoder if decoder is not None else ResponseDecoder()


def _item_id(page: Page, index: int) -> str:
    if not page.items:
        return ""
    item = page.items[index]
    if isinstance(item, collections.abc.Mapping) and isinstance(item.get("id"), str):
        return item["id"]
    return ""


def list_page(
    executor: OperationExecutor,
    op: OperationDescriptor,
    cursor: typing.Optional[Cursor] = None,
    cancel: typing.Optional[CancelSignal] = None,
) -> Page:
    return PaginationWalker(executor).list_page(op, cursor, cancel=cancel)
