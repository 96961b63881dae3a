import pytest

from ...exceptions import MalformedResponseError
from ...utils import ABSENT
from ..decoder import CoercionError
from ..utils import JSONPointer


@pytest.fixture
def target():
    from ..decoder import ResponseDecoder

    return ResponseDecoder()


def test_decode_keeps_presence(target):
    value = target(b'{"a": 1, "b": null, "c": [1, 2.5, "x", true]}')
    assert value == {"a": 1, "b": None, "c": [1, 2.5, "x", True]}
    assert target.lookup(value, "/a") == 1
    assert target.lookup(value, "/b") is None
    assert target.lookup(value, "/d") is ABSENT
    assert target.lookup(value, JSONPointer("/c") / 3) is True


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"{",
        b"<html>bad gateway</html>",
        b'{"a": NaN}',
        b'{"a": Infinity}',
        b"\xff\xfe",
    ],
)
def test_decode_rejects_invalid_json(target, body):
    with pytest.raises(MalformedResponseError) as e:
        target.decode(body)
    assert "not valid JSON" in e.value.message


def test_coerce_integer(target):
    p = JSONPointer("/created")
    assert target.coerce(p, int, 1700000000) == 1700000000
    assert target.coerce(p, int, 3.0) == 3
    assert isinstance(target.coerce(p, int, 3.0), int)
    with pytest.raises(CoercionError) as e:
        target.coerce(p, int, 3.5)
    assert e.value.pointer == p
    assert "fractional" in e.value.message
    with pytest.raises(CoercionError):
        target.coerce(p, int, True)
    with pytest.raises(CoercionError):
        target.coerce(p, int, "3")


def test_coerce_number(target):
    p = JSONPointer("/temperature")
    assert target.coerce(p, float, 1) == 1.0
    assert target.coerce(p, float, 0.25) == 0.25
    with pytest.raises(CoercionError):
        target.coerce(p, float, False)


def test_coerce_others(target):
    p = JSONPointer("/x")
    assert target.coerce(p, str, "a") == "a"
    assert target.coerce(p, bool, False) is False
    assert target.coerce(p, list, [1]) == [1]
    assert target.coerce(p, dict, {"a": 1}) == {"a": 1}
    assert target.coerce(p, object, {"any": ["thing"]}) == {"any": ["thing"]}
    with pytest.raises(CoercionError):
        target.coerce(p, bool, 0)
    with pytest.raises(CoercionError):
        target.coerce(p, list, "abc")
    with pytest.raises(CoercionError):
        target.coerce(p, dict, [])
    with pytest.raises(TypeError):
        target.coerce(p, bytes, b"")


def test_coerce_null(target):
    p = JSONPointer("/x")
    assert target.coerce(p, str, None) is None
    with pytest.raises(CoercionError):
        target.coerce(p, str, None, allow_null=False)


def test_require_object(target):
    assert target.require_object({"a": 1}) == {"a": 1}
    with pytest.raises(MalformedResponseError) as e:
        target.require_object([1, 2])
    assert e.value.errors == [(JSONPointer(), "value has type array where object expected")]
    with pytest.raises(MalformedResponseError):
        target.require_object(None)
