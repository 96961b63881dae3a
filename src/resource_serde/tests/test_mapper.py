import pytest

from ..exceptions import (
    FileUnavailableError,
    InvalidIdentityError,
    MalformedOperationError,
    MalformedResponseError,
    PartialWriteError,
    PermissionDeniedError,
)
from ..interfaces import HttpResponse
from ..pagination import Cursor
from ..resources import (
    ASSISTANT,
    AUDIO_TRANSCRIPTION,
    EDIT,
    FILE,
    PROJECT_SERVICE_ACCOUNT,
    RATE_LIMIT,
    TEXT_TO_SPEECH,
    VECTOR_STORE_FILE,
)
from .testing import json_body, json_response, make_client

EDIT_RESPONSE = {
    "id": "edit-1",
    "object": "edit",
    "created": 1700000000,
    "model": "gpt-x",
    "choices": [{"text": "the cat sat", "index": 0}],
    "usage": {"prompt_tokens": 5, "completion_tokens": 5, "total_tokens": 10},
}

SERVICE_ACCOUNT_RESPONSE = {
    "object": "organization.project.service_account",
    "id": "svc_123",
    "name": "ci",
    "role": "member",
    "created_at": 1700000000,
    "api_key": {
        "object": "organization.project.service_account.api_key",
        "value": "sk-abcdefghijklmnop",
        "name": "Secret Key",
        "created_at": 1700000000,
        "id": "key_abc",
    },
}


@pytest.fixture
def target():
    from ..mapper import ResourceMapper

    return ResourceMapper


def test_create_edit(target):
    client, transport = make_client(json_response(200, EDIT_RESPONSE))
    state = target(EDIT, client).create(
        {"model": "gpt-x", "instruction": "fix grammar", "input": "teh cat sat"}
    )
    assert state.identifier == "edit-1"
    assert state.attributes["edit_id"] == "edit-1"
    assert state.attributes["created"] == 1700000000
    assert state.attributes["choices"] == [{"text": "the cat sat", "index": 0}]
    assert state.attributes["usage"] == {
        "prompt_tokens": 5,
        "completion_tokens": 5,
        "total_tokens": 10,
    }
    assert state.attributes["model_used"] == "gpt-x"
    assert state.attributes["model"] == "gpt-x"

    request = transport.last_request
    assert request.method == "POST"
    assert str(request.url) == "https://api.example.test/v1/edits"
    assert json_body(request) == {
        "model": "gpt-x",
        "input": "teh cat sat",
        "instruction": "fix grammar",
    }
    assert "OpenAI-Project" not in request.headers
    assert "OpenAI-Beta" not in request.headers


def test_create_edit_with_project_header(target):
    client, transport = make_client(json_response(200, EDIT_RESPONSE))
    target(EDIT, client).create(
        {"model": "gpt-x", "instruction": "fix", "temperature": 0.5, "project_id": "proj_1"}
    )
    request = transport.last_request
    assert request.headers["OpenAI-Project"] == "proj_1"
    assert json_body(request) == {"model": "gpt-x", "instruction": "fix", "temperature": 0.5}


def test_create_reports_every_missing_attribute(target):
    client, transport = make_client()
    with pytest.raises(MalformedOperationError) as e:
        target(EDIT, client).create({"input": "x", "model": None})
    assert e.value.message == "missing required attributes: model, and instruction"
    assert transport.requests == []


def test_create_rejects_unknown_and_read_only_inputs(target):
    client, transport = make_client()
    mapper = target(EDIT, client)
    with pytest.raises(MalformedOperationError):
        mapper.create({"model": "m", "instruction": "i", "nonsense": 1})
    with pytest.raises(MalformedOperationError):
        mapper.create({"model": "m", "instruction": "i", "edit_id": "edit-9"})
    assert transport.requests == []


def test_create_partial_write(target):
    client, _ = make_client(json_response(200, dict(EDIT_RESPONSE, created="yesterday")))
    with pytest.raises(PartialWriteError) as e:
        target(EDIT, client).create({"model": "gpt-x", "instruction": "fix"})
    assert e.value.identifier == "edit-1"
    assert e.value.attributes["edit_id"] == "edit-1"
    assert "created" not in e.value.attributes
    assert isinstance(e.value.__cause__, MalformedResponseError)


def test_create_without_id(target):
    client, _ = make_client(json_response(200, {"object": "edit"}))
    with pytest.raises(MalformedResponseError):
        target(EDIT, client).create({"model": "gpt-x", "instruction": "fix"})


def test_create_failure_is_propagated(target):
    client, _ = make_client(
        json_response(403, {"error": {"message": "denied", "type": "insufficient_permission"}})
    )
    with pytest.raises(PermissionDeniedError) as e:
        target(EDIT, client).create({"model": "gpt-x", "instruction": "fix"})
    assert e.value.record.provider_message == "denied"


def test_service_account_lifecycle(target):
    client, transport = make_client(
        json_response(201, SERVICE_ACCOUNT_RESPONSE),
        json_response(200, dict(SERVICE_ACCOUNT_RESPONSE, api_key=None)),
        json_response(404, {"error": {"message": "gone", "type": "invalid_request_error"}}),
        json_response(200, {"deleted": True}),
        json_response(404, {"error": {"message": "gone", "type": "invalid_request_error"}}),
    )
    mapper = target(PROJECT_SERVICE_ACCOUNT, client)

    state = mapper.create({"project_id": "proj_abc", "name": "ci", "api_key": "sk-admin"})
    assert state.identifier == "proj_abc:svc_123"
    assert state.attributes["project_id"] == "proj_abc"
    assert state.attributes["service_account_id"] == "svc_123"
    assert state.attributes["api_key_id"] == "key_abc"
    assert state.attributes["api_key_value"] == "sk-abcdefghijklmnop"
    assert state.attributes["created_at"] == "2023-11-14T22:13:20Z"
    assert "api_key" not in state.attributes
    request = transport.requests[0]
    assert (
        str(request.url)
        == "https://api.example.test/v1/organization/projects/proj_abc/service_accounts"
    )
    assert request.headers["Authorization"] == "Bearer sk-admin"
    assert json_body(request) == {"name": "ci"}

    state = mapper.read("proj_abc:svc_123")
    assert state is not None
    assert state.attributes == {
        "project_id": "proj_abc",
        "name": "ci",
        "service_account_id": "svc_123",
        "role": "member",
        "created_at": "2023-11-14T22:13:20Z",
    }
    request = transport.requests[1]
    assert request.method == "GET"
    assert (
        str(request.url)
        == "https://api.example.test/v1/organization/projects/proj_abc/service_accounts/svc_123"
    )
    assert request.headers["Authorization"] == "Bearer sk-test"

    assert mapper.read("proj_abc:svc_123") is None
    assert mapper.delete("proj_abc:svc_123", override_token="sk-admin") is True
    assert transport.requests[3].method == "DELETE"
    assert transport.requests[3].headers["Authorization"] == "Bearer sk-admin"
    assert mapper.delete("proj_abc:svc_123") is False


def test_read_rejects_malformed_identifier(target):
    from ..exceptions import InvalidIdentityError

    client, transport = make_client()
    with pytest.raises(InvalidIdentityError):
        target(PROJECT_SERVICE_ACCOUNT, client).read("svc_123")
    assert transport.requests == []


def test_unsupported_operation(target):
    client, _ = make_client()
    with pytest.raises(MalformedOperationError) as e:
        target(EDIT, client).read("edit-1")
    assert e.value.message == "edit does not support read"


def test_update_sends_supplied_inputs_only(target):
    client, transport = make_client(
        json_response(200, {"id": "asst_1", "model": "gpt-x", "name": "new", "description": None})
    )
    state = target(ASSISTANT, client).update(
        "asst_1", {"name": "new", "description": None, "tools": None}
    )
    request = transport.last_request
    assert request.method == "POST"
    assert str(request.url) == "https://api.example.test/v1/assistants/asst_1"
    assert request.headers["OpenAI-Beta"] == "assistants=v2"
    assert json_body(request) == {"name": "new", "description": None}
    assert state.identifier == "asst_1"
    assert state.attributes == {"assistant_id": "asst_1", "name": "new", "model": "gpt-x"}


def test_update_with_wire_names(target):
    client, transport = make_client(
        json_response(
            200,
            {
                "object": "project.rate_limit",
                "id": "rl-gpt-x",
                "model": "gpt-x",
                "max_requests_per_1_minute": 500,
                "max_tokens_per_1_minute": 150000,
            },
        )
    )
    state = target(RATE_LIMIT, client).update(
        "proj_abc:rl-gpt-x", {"max_requests_per_minute": 500}
    )
    request = transport.last_request
    assert (
        str(request.url)
        == "https://api.example.test/v1/organization/projects/proj_abc/rate_limits/rl-gpt-x"
    )
    assert json_body(request) == {"max_requests_per_1_minute": 500}
    assert state.attributes["project_id"] == "proj_abc"
    assert state.attributes["max_tokens_per_minute"] == 150000


def test_list_page(target):
    client, transport = make_client(
        json_response(
            200,
            {
                "object": "list",
                "data": [
                    {"id": "file-1", "status": "completed", "created_at": 1700000000},
                    {"id": "file-2", "status": "in_progress", "last_error": None},
                ],
                "first_id": "file-1",
                "last_id": "file-2",
                "has_more": False,
            },
        )
    )
    page = target(VECTOR_STORE_FILE, client).list_page(
        {"vector_store_id": "vs_1"}, Cursor(limit=2)
    )
    request = transport.last_request
    assert request.url.path == "/v1/vector_stores/vs_1/files"
    assert request.url.params["limit"] == "2"
    assert request.headers["OpenAI-Beta"] == "assistants=v2"
    assert page.items == [
        {"file_id": "file-1", "status": "completed", "created_at": "2023-11-14T22:13:20Z"},
        {"file_id": "file-2", "status": "in_progress"},
    ]
    assert page.last_id == "file-2"


def test_list_page_requires_path_inputs(target):
    client, transport = make_client()
    with pytest.raises(MalformedOperationError) as e:
        target(VECTOR_STORE_FILE, client).list_page()
    assert "vector_store_id" in e.value.message
    assert transport.requests == []


def test_iter_pages(target):
    client, transport = make_client(
        json_response(200, {"data": [{"id": "file-1"}], "last_id": "file-1", "has_more": True}),
        json_response(200, {"data": [{"id": "file-2"}], "last_id": "file-2", "has_more": False}),
    )
    pages = list(target(FILE, client).iter_pages())
    assert [p.items for p in pages] == [[{"file_id": "file-1"}], [{"file_id": "file-2"}]]
    assert transport.requests[1].url.params["after"] == "file-1"


def test_create_file_multipart(target, tmp_path):
    path = tmp_path / "train.jsonl"
    path.write_bytes(b'{"prompt": "a"}\n')
    client, transport = make_client(
        json_response(
            200,
            {
                "id": "file-abc",
                "object": "file",
                "bytes": 16,
                "created_at": 1700000000,
                "filename": "train.jsonl",
                "purpose": "fine-tune",
            },
        )
    )
    state = target(FILE, client).create({"file": str(path), "purpose": "fine-tune"})
    assert state.identifier == "file-abc"
    assert state.attributes["bytes"] == 16
    assert state.attributes["filename"] == "train.jsonl"
    content = transport.last_request.content
    assert content.index(b'name="purpose"') < content.index(b'name="file"')
    assert b'{"prompt": "a"}' in content


def test_create_transcription(target, tmp_path):
    audio = tmp_path / "speech.wav"
    audio.write_bytes(b"RIFF")
    client, transport = make_client(
        json_response(200, {"text": "hello", "language": "english", "duration": 1.5})
    )
    state = target(AUDIO_TRANSCRIPTION, client).create(
        {"file": str(audio), "model": "whisper-1", "language": "en", "include": ["logprobs"]}
    )
    assert state.identifier.startswith("audio_transcription-")
    assert state.attributes["text"] == "hello"
    assert state.attributes["language"] == "english"
    assert state.attributes["duration"] == 1.5
    content = transport.last_request.content
    assert (
        content.index(b'name="model"')
        < content.index(b'name="language"')
        < content.index(b'name="include[]"')
        < content.index(b'name="file"')
    )


def test_create_rejects_parent_with_separator(target):
    client, transport = make_client()
    with pytest.raises(InvalidIdentityError):
        target(PROJECT_SERVICE_ACCOUNT, client).create({"project_id": "proj:abc", "name": "ci"})
    assert transport.requests == []


def _speech_response():
    return HttpResponse(status_code=200, body=b"ID3-audio", headers={"content-type": "audio/mpeg"})


def test_create_text_to_speech(target, tmp_path):
    output = tmp_path / "speech.mp3"
    client, transport = make_client(_speech_response())
    state = target(TEXT_TO_SPEECH, client).create(
        {
            "model": "tts-1",
            "input": "hello there",
            "voice": "alloy",
            "speed": 1.25,
            "output_file": str(output),
        }
    )
    assert state.identifier.startswith("text_to_speech-")
    assert state.content == b"ID3-audio"
    assert output.read_bytes() == b"ID3-audio"
    assert state.attributes["output_file"] == str(output)
    assert state.attributes["voice"] == "alloy"
    request = transport.last_request
    assert str(request.url) == "https://api.example.test/v1/audio/speech"
    assert json_body(request) == {
        "model": "tts-1",
        "input": "hello there",
        "voice": "alloy",
        "speed": 1.25,
    }


def test_create_text_to_speech_unwritable_output(target, tmp_path):
    client, _ = make_client(_speech_response())
    with pytest.raises(FileUnavailableError):
        target(TEXT_TO_SPEECH, client).create(
            {
                "model": "tts-1",
                "input": "hello there",
                "voice": "alloy",
                "output_file": str(tmp_path / "missing" / "speech.mp3"),
            }
        )
