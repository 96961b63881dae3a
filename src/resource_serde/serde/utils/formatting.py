import datetime
import json
import typing


def english_enumerate(items: typing.Iterable[str], conj: str = ", and ") -> str:
    buf = []

    i = iter(items)
    try:
        x = next(i)
    except StopIteration:
        return ""
    buf.append(x)

    lx: typing.Optional[str] = None

    for x in i:
        if lx is not None:
            buf.append(", ")
            buf.append(lx)
        lx = x
    if lx is not None:
        buf.append(conj)
        buf.append(lx)
    return "".join(buf)


def compact_json(value: typing.Any) -> str:
    """
    Renders a value as the shortest JSON text, keeping the key order of mappings.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def format_unix_timestamp(value: typing.Union[int, float]) -> str:
    """
    Formats seconds since the epoch as an RFC 3339 timestamp in UTC.

    >>> format_unix_timestamp(1700000000)
    '2023-11-14T22:13:20Z'
    """
    dt = datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    if dt.microsecond:
        return dt.isoformat().replace("+00:00", "Z")
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
