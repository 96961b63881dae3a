import pytest

from ..declarative import Attr
from ..exceptions import InvalidDeclarationError
from ..models import Endpoint, Operation, Transform
from ..serde.utils import JSONPointer


@pytest.fixture
def target():
    from ..declarative import declare

    return declare


def test_declare(target):
    class ServiceAccount:
        class Meta:
            name = "project_service_account"
            create = "post /organization/projects/{project_id}/service_accounts"
            read = "GET /organization/projects/{project_id}/service_accounts/{id}"
            identity = ("project_id",)
            override_token_attribute = "api_key"
            attributes = {
                "project_id": Attr(str, required_on_creation=True, body=False, source=None),
                "name": Attr(str, required_on_creation=True),
                "api_key": Attr(str, write_only=True, body=False),
                "api_key_id": Attr(str, read_only=True, source="/api_key/id"),
                "created_at": Attr(str, read_only=True, transform=Transform.TIMESTAMP),
            }

    descr = target(ServiceAccount)
    assert descr.name == "project_service_account"
    assert list(descr.attributes) == ["project_id", "name", "api_key", "api_key_id", "created_at"]
    assert descr.endpoint(Operation.CREATE) == Endpoint(
        "POST", "/organization/projects/{project_id}/service_accounts"
    )
    assert descr.endpoint(Operation.DELETE) is None
    assert descr.identity == ("project_id",)
    assert descr.id_source == JSONPointer("/id")

    name = descr.attributes["name"]
    assert name.parent is descr
    assert name.source == JSONPointer("/name")
    assert name.wire_name == "name"
    assert name.writable and name.projected

    assert descr.attributes["project_id"].source is None
    assert not descr.attributes["api_key"].projected
    assert descr.attributes["api_key_id"].source == JSONPointer("/api_key/id")
    assert not descr.attributes["api_key_id"].writable
    assert [a.name for a in descr.projected_attributes] == ["name", "api_key_id", "created_at"]


def test_declare_meta_directly(target):
    class Meta:
        name = "thing"
        attributes = [Attr(int, name="size", wire_name="size_bytes")]

    descr = target(Meta)
    assert descr.attributes["size"].wire_name == "size_bytes"


def _meta(**overrides):
    attrs = {
        "name": "thing",
        "create": "POST /parents/{parent_id}/things",
        "read": "GET /parents/{parent_id}/things/{thing_id}",
        "identity": ("parent_id",),
        "attributes": {
            "parent_id": Attr(str, body=False, source=None),
            "label": Attr(str),
        },
    }
    attrs.update(overrides)
    return type("Meta", (), attrs)


def test_valid_fixture(target):
    assert target(_meta()).name == "thing"


@pytest.mark.parametrize(
    "overrides",
    [
        {"create": "POST /parents/{parent}/things"},
        {"read": "GET /parents/{parent_id}/things"},
        {"read": "GET /things/{thing_id}/parents/{parent_id}/x/{y}"},
        {"identity": ("unknown",)},
        {"identity": ("parent_id", "label")},
        {"create": "FETCH /things"},
        {"create": "POST"},
        {"file_attribute": "file"},
        {"header_attributes": {"project": "OpenAI-Project"}},
        {"override_token_attribute": "token"},
        {"raw_response": True},
        {"output_attribute": "label"},
        {"raw_response": True, "local_identity": True, "output_attribute": "path"},
    ],
)
def test_invalid(target, overrides):
    with pytest.raises(InvalidDeclarationError):
        target(_meta(**overrides))


def test_list_endpoint_key(target):
    descr = target(_meta(list_="GET /parents/{parent_id}/things"))
    assert descr.endpoint(Operation.LIST) == Endpoint("GET", "/parents/{parent_id}/things")
    assert target(_meta(list="GET /parents/{parent_id}/things")).endpoint(Operation.LIST) is None


def test_raw_response(target):
    descr = target(
        _meta(
            raw_response=True,
            local_identity=True,
            output_attribute="label",
        )
    )
    assert descr.raw_response
    assert descr.output_attribute == "label"
    assert not target(_meta()).raw_response


def test_invalid_attributes(target):
    with pytest.raises(InvalidDeclarationError):
        target(_meta(attributes={"x": Attr()}))
    with pytest.raises(InvalidDeclarationError):
        target(_meta(attributes=[Attr(str)]))
    with pytest.raises(InvalidDeclarationError):
        target(_meta(attributes={"x": Attr(str, read_only=True, write_only=True)}))


def test_missing_name(target):
    class Meta:
        attributes = {}

    with pytest.raises(InvalidDeclarationError):
        target(Meta)


def test_catalogue():
    from ..resources import CATALOGUE, PROJECT_SERVICE_ACCOUNT, TEXT_TO_SPEECH, VECTOR_STORE

    assert len(CATALOGUE) == 15
    assert VECTOR_STORE.beta
    assert "list" not in VECTOR_STORE.attributes
    assert VECTOR_STORE.attributes["file_ids"].type is list
    assert PROJECT_SERVICE_ACCOUNT.override_token_attribute == "api_key"
    assert TEXT_TO_SPEECH.raw_response and TEXT_TO_SPEECH.local_identity
    assert TEXT_TO_SPEECH.endpoint(Operation.LIST) is None
