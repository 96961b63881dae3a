import pytest

from ..exceptions import InvalidIdentityError


@pytest.fixture
def codec():
    from .. import identity

    return identity


@pytest.mark.parametrize(
    "segments",
    [
        ["proj_abc", "svc_123"],
        ["vs_1", "file-xyz"],
        ["a", "b"],
        ["edit-1"],
    ],
)
def test_round_trip(codec, segments):
    encoded = codec.encode(segments)
    assert codec.decode(encoded, len(segments)) == segments


def test_encode(codec):
    assert codec.encode(["proj_abc", "svc_123"]) == "proj_abc:svc_123"
    assert codec.encode(["edit-1"]) == "edit-1"


@pytest.mark.parametrize(
    "segments",
    [
        [],
        ["a", "b", "c"],
        ["", "b"],
        ["a", ""],
        ["a:b", "c"],
        ["a", "b:c"],
    ],
)
def test_encode_invalid(codec, segments):
    with pytest.raises(InvalidIdentityError):
        codec.encode(segments)


def test_encode_rejects_plain_string(codec):
    with pytest.raises(TypeError):
        codec.encode("proj_abc")


def test_decode_only_splits_expected_separators(codec):
    assert codec.decode("proj:child:with:colons", 2) == ["proj", "child:with:colons"]
    assert codec.decode("a:b", 1) == ["a:b"]


@pytest.mark.parametrize(
    "id, expected_segments",
    [
        ("", 1),
        ("", 2),
        ("proj_abc", 2),
        (":svc", 2),
        ("proj:", 2),
    ],
)
def test_decode_invalid(codec, id, expected_segments):
    with pytest.raises(InvalidIdentityError) as e:
        codec.decode(id, expected_segments)
    assert "invalid identifier" in e.value.message


def test_decode_rejects_bad_count(codec):
    with pytest.raises(ValueError):
        codec.decode("a", 0)
