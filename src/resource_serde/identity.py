"""
Composite identifiers for objects that live inside a parent container.

An object whose natural key is scoped by a parent (a service account inside a project, a
file inside a vector store) is addressed by ``<parent-id>:<child-id>``.  Callers persist that
string and hand it back on read and delete, so the codec has to be exactly reversible.
"""

import typing

from .exceptions import InvalidIdentityError

SEPARATOR = ":"
MAX_SEGMENTS = 2


def encode(segments: typing.Sequence[str]) -> str:
    """
    Joins path segments into an external identifier.

    :param Sequence[str] segments: one or two non-empty segments, outermost first.
    :return: the identifier.
    :raises InvalidIdentityError: if a segment is empty or contains the separator.
    """
    if isinstance(segments, str):
        raise TypeError("segments must be a sequence of strings, not a string")
    if not 1 <= len(segments) <= MAX_SEGMENTS:
        raise InvalidIdentityError(
            list(segments), f"expected 1 to {MAX_SEGMENTS} segments, got {len(segments)}"
        )
    check_segments(segments)
    return SEPARATOR.join(segments)


def check_segments(segments: typing.Sequence[str]) -> None:
    """
    Checks that every segment can take part in an identifier, so that parent segments can be
    vetted before anything is created on the provider.

    :raises InvalidIdentityError: if a segment is empty or contains the separator.
    """
    for i, segment in enumerate(segments):
        if not isinstance(segment, str) or not segment:
            raise InvalidIdentityError(list(segments), f"segment {i} is empty")
        if SEPARATOR in segment:
            raise InvalidIdentityError(
                list(segments), f'segment {i} contains the separator "{SEPARATOR}"'
            )


def decode(id: str, expected_segments: int) -> typing.List[str]:
    """
    Splits an external identifier back into its segments.

    Only the first ``expected_segments - 1`` separators are significant; whatever follows
    belongs to the rightmost segment.

    :param str id: the identifier.
    :param int expected_segments: how many segments the caller's entity uses.
    :return: the segments, outermost first.
    :raises InvalidIdentityError: if the segment count does not match or a segment is empty.
    """
    if expected_segments < 1:
        raise ValueError("expected_segments must be positive")
    if not id:
        raise InvalidIdentityError(id, "identifier is empty")
    if expected_segments == 1:
        segments = [id]
    else:
        segments = id.split(SEPARATOR, expected_segments - 1)
    if len(segments) != expected_segments:
        raise InvalidIdentityError(
            id,
            f"expected {expected_segments} segments separated by "
            f'"{SEPARATOR}", got {len(segments)}',
        )
    if not all(segments):
        raise InvalidIdentityError(id, "identifier contains an empty segment")
    return segments
