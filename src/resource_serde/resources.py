"""
Declarations of the provider objects the engine knows how to manage.

Organization-level objects (projects and everything under them, admin API keys, invites)
must be managed with a client that authenticates with the admin key, see
:py:func:`resource_serde.client.build_client`.
"""

from .declarative import Attr, declare
from .models import Transform

TIMESTAMP = Transform.TIMESTAMP


class Edit:
    class Meta:
        name = "edit"
        create = "POST /edits"
        header_attributes = {"project_id": "OpenAI-Project"}
        attributes = {
            "model": Attr(str, required_on_creation=True, source=None),
            "input": Attr(str, source=None),
            "instruction": Attr(str, required_on_creation=True, source=None),
            "temperature": Attr(float, source=None),
            "top_p": Attr(float, source=None),
            "n": Attr(int, source=None),
            "project_id": Attr(str, body=False, source=None),
            "edit_id": Attr(str, read_only=True, source="/id"),
            "object": Attr(str, read_only=True),
            "created": Attr(int, read_only=True),
            "model_used": Attr(str, read_only=True, source="/model"),
            "choices": Attr(list, read_only=True),
            "usage": Attr(dict, read_only=True),
        }


class Project:
    class Meta:
        name = "project"
        create = "POST /organization/projects"
        read = "GET /organization/projects/{project_id}"
        update = "POST /organization/projects/{project_id}"
        delete = "POST /organization/projects/{project_id}/archive"
        list_ = "GET /organization/projects"
        attributes = {
            "project_id": Attr(str, read_only=True, source="/id"),
            "name": Attr(str, required_on_creation=True),
            "status": Attr(str, read_only=True),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "archived_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class ProjectUser:
    class Meta:
        name = "project_user"
        create = "POST /organization/projects/{project_id}/users"
        read = "GET /organization/projects/{project_id}/users/{user_id}"
        update = "POST /organization/projects/{project_id}/users/{user_id}"
        delete = "DELETE /organization/projects/{project_id}/users/{user_id}"
        identity = ("project_id",)
        list_ = "GET /organization/projects/{project_id}/users"
        attributes = {
            "project_id": Attr(str, required_on_creation=True, body=False, source=None),
            "user_id": Attr(str, required_on_creation=True, source="/id"),
            "role": Attr(str, required_on_creation=True),
            "email": Attr(str, read_only=True),
            "name": Attr(str, read_only=True),
            "added_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class ProjectServiceAccount:
    class Meta:
        name = "project_service_account"
        create = "POST /organization/projects/{project_id}/service_accounts"
        read = "GET /organization/projects/{project_id}/service_accounts/{service_account_id}"
        delete = "DELETE /organization/projects/{project_id}/service_accounts/{service_account_id}"
        identity = ("project_id",)
        override_token_attribute = "api_key"
        list_ = "GET /organization/projects/{project_id}/service_accounts"
        attributes = {
            "project_id": Attr(str, required_on_creation=True, body=False, source=None),
            "name": Attr(str, required_on_creation=True),
            "api_key": Attr(str, write_only=True, body=False),
            "service_account_id": Attr(str, read_only=True, source="/id"),
            "role": Attr(str, read_only=True),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "api_key_id": Attr(str, read_only=True, source="/api_key/id"),
            "api_key_value": Attr(str, read_only=True, source="/api_key/value"),
        }


class ProjectApiKey:
    class Meta:
        name = "project_api_key"
        read = "GET /organization/projects/{project_id}/api_keys/{key_id}"
        delete = "DELETE /organization/projects/{project_id}/api_keys/{key_id}"
        identity = ("project_id",)
        list_ = "GET /organization/projects/{project_id}/api_keys"
        attributes = {
            "project_id": Attr(str, body=False, source=None),
            "api_key_id": Attr(str, read_only=True, source="/id"),
            "name": Attr(str, read_only=True),
            "redacted_value": Attr(str, read_only=True),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "owner": Attr(dict, read_only=True),
        }


class RateLimit:
    class Meta:
        name = "rate_limit"
        create = "POST /organization/projects/{project_id}/rate_limits/{rate_limit_id}"
        update = "POST /organization/projects/{project_id}/rate_limits/{rate_limit_id}"
        identity = ("project_id",)
        list_ = "GET /organization/projects/{project_id}/rate_limits"
        attributes = {
            "project_id": Attr(str, required_on_creation=True, body=False, source=None),
            "rate_limit_id": Attr(str, required_on_creation=True, body=False, source="/id"),
            "model": Attr(str, read_only=True),
            "max_requests_per_minute": Attr(
                int,
                wire_name="max_requests_per_1_minute",
                source="/max_requests_per_1_minute",
            ),
            "max_tokens_per_minute": Attr(
                int,
                wire_name="max_tokens_per_1_minute",
                source="/max_tokens_per_1_minute",
            ),
            "max_images_per_minute": Attr(
                int,
                wire_name="max_images_per_1_minute",
                source="/max_images_per_1_minute",
            ),
            "max_audio_megabytes_per_minute": Attr(
                int,
                wire_name="max_audio_megabytes_per_1_minute",
                source="/max_audio_megabytes_per_1_minute",
            ),
            "max_requests_per_day": Attr(
                int,
                wire_name="max_requests_per_1_day",
                source="/max_requests_per_1_day",
            ),
            "batch_max_input_tokens_per_day": Attr(
                int,
                wire_name="batch_1_day_max_input_tokens",
                source="/batch_1_day_max_input_tokens",
            ),
        }


class AdminApiKey:
    class Meta:
        name = "admin_api_key"
        create = "POST /organization/admin_api_keys"
        read = "GET /organization/admin_api_keys/{key_id}"
        delete = "DELETE /organization/admin_api_keys/{key_id}"
        list_ = "GET /organization/admin_api_keys"
        attributes = {
            "key_id": Attr(str, read_only=True, source="/id"),
            "name": Attr(str, required_on_creation=True),
            "value": Attr(str, read_only=True),
            "redacted_value": Attr(str, read_only=True),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "last_used_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class Invite:
    class Meta:
        name = "invite"
        create = "POST /organization/invites"
        read = "GET /organization/invites/{invite_id}"
        delete = "DELETE /organization/invites/{invite_id}"
        list_ = "GET /organization/invites"
        attributes = {
            "invite_id": Attr(str, read_only=True, source="/id"),
            "email": Attr(str, required_on_creation=True),
            "role": Attr(str, required_on_creation=True),
            "projects": Attr(list, write_only=True),
            "status": Attr(str, read_only=True),
            "invited_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "expires_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "accepted_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class Assistant:
    class Meta:
        name = "assistant"
        beta = True
        create = "POST /assistants"
        read = "GET /assistants/{assistant_id}"
        update = "POST /assistants/{assistant_id}"
        delete = "DELETE /assistants/{assistant_id}"
        list_ = "GET /assistants"
        attributes = {
            "assistant_id": Attr(str, read_only=True, source="/id"),
            "model": Attr(str, required_on_creation=True),
            "name": Attr(str, allow_null=True),
            "description": Attr(str, allow_null=True),
            "instructions": Attr(str, allow_null=True),
            "tools": Attr(list),
            "tool_resources": Attr(dict, allow_null=True),
            "metadata": Attr(dict, allow_null=True, transform=Transform.STRING_MAP),
            "temperature": Attr(float, allow_null=True),
            "top_p": Attr(float, allow_null=True),
            "response_format": Attr(object, allow_null=True, transform=Transform.JSON_TEXT),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class Thread:
    class Meta:
        name = "thread"
        beta = True
        create = "POST /threads"
        read = "GET /threads/{thread_id}"
        update = "POST /threads/{thread_id}"
        delete = "DELETE /threads/{thread_id}"
        attributes = {
            "thread_id": Attr(str, read_only=True, source="/id"),
            "messages": Attr(list, write_only=True),
            "tool_resources": Attr(dict, allow_null=True),
            "metadata": Attr(dict, allow_null=True, transform=Transform.STRING_MAP),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class VectorStore:
    class Meta:
        name = "vector_store"
        beta = True
        create = "POST /vector_stores"
        read = "GET /vector_stores/{vector_store_id}"
        update = "POST /vector_stores/{vector_store_id}"
        delete = "DELETE /vector_stores/{vector_store_id}"
        list_ = "GET /vector_stores"
        attributes = {
            "vector_store_id": Attr(str, read_only=True, source="/id"),
            "name": Attr(str),
            "file_ids": Attr(list, write_only=True),
            "expires_after": Attr(dict, allow_null=True),
            "chunking_strategy": Attr(dict, write_only=True),
            "metadata": Attr(dict, allow_null=True, transform=Transform.STRING_MAP),
            "status": Attr(str, read_only=True),
            "usage_bytes": Attr(int, read_only=True),
            "file_counts": Attr(dict, read_only=True),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "expires_at": Attr(str, read_only=True, transform=TIMESTAMP),
            "last_active_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class VectorStoreFile:
    class Meta:
        name = "vector_store_file"
        beta = True
        create = "POST /vector_stores/{vector_store_id}/files"
        read = "GET /vector_stores/{vector_store_id}/files/{file_id}"
        update = "POST /vector_stores/{vector_store_id}/files/{file_id}"
        delete = "DELETE /vector_stores/{vector_store_id}/files/{file_id}"
        identity = ("vector_store_id",)
        list_ = "GET /vector_stores/{vector_store_id}/files"
        attributes = {
            "vector_store_id": Attr(str, required_on_creation=True, body=False, source=None),
            "file_id": Attr(str, required_on_creation=True, source="/id"),
            "attributes": Attr(dict, allow_null=True, transform=Transform.STRING_MAP),
            "chunking_strategy": Attr(dict),
            "status": Attr(str, read_only=True),
            "usage_bytes": Attr(int, read_only=True),
            "last_error": Attr(object, read_only=True, transform=Transform.JSON_TEXT),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class File:
    class Meta:
        name = "file"
        create = "POST /files"
        read = "GET /files/{file_id}"
        delete = "DELETE /files/{file_id}"
        file_attribute = "file"
        list_ = "GET /files"
        attributes = {
            "file_id": Attr(str, read_only=True, source="/id"),
            "file": Attr(str, required_on_creation=True, write_only=True),
            "purpose": Attr(str, required_on_creation=True),
            "filename": Attr(str, read_only=True),
            "bytes": Attr(int, read_only=True),
            "status": Attr(str, read_only=True),
            "created_at": Attr(str, read_only=True, transform=TIMESTAMP),
        }


class AudioTranscription:
    class Meta:
        name = "audio_transcription"
        create = "POST /audio/transcriptions"
        file_attribute = "file"
        local_identity = True
        attributes = {
            "model": Attr(str, required_on_creation=True, source=None),
            "language": Attr(str),
            "prompt": Attr(str, source=None),
            "response_format": Attr(str, source=None),
            "temperature": Attr(float, source=None),
            "include": Attr(list, source=None),
            "timestamp_granularities": Attr(list, source=None),
            "file": Attr(str, required_on_creation=True, write_only=True),
            "text": Attr(str, read_only=True),
            "duration": Attr(float, read_only=True),
            "segments": Attr(list, read_only=True),
            "words": Attr(list, read_only=True),
        }


class TextToSpeech:
    class Meta:
        name = "text_to_speech"
        create = "POST /audio/speech"
        local_identity = True
        raw_response = True
        output_attribute = "output_file"
        attributes = {
            "model": Attr(str, required_on_creation=True, source=None),
            "input": Attr(str, required_on_creation=True, source=None),
            "voice": Attr(str, required_on_creation=True, source=None),
            "response_format": Attr(str, source=None),
            "speed": Attr(float, source=None),
            "instructions": Attr(str, source=None),
            "output_file": Attr(str, required_on_creation=True, body=False, source=None),
        }


EDIT = declare(Edit)
PROJECT = declare(Project)
PROJECT_USER = declare(ProjectUser)
PROJECT_SERVICE_ACCOUNT = declare(ProjectServiceAccount)
PROJECT_API_KEY = declare(ProjectApiKey)
RATE_LIMIT = declare(RateLimit)
ADMIN_API_KEY = declare(AdminApiKey)
INVITE = declare(Invite)
ASSISTANT = declare(Assistant)
THREAD = declare(Thread)
VECTOR_STORE = declare(VectorStore)
VECTOR_STORE_FILE = declare(VectorStoreFile)
FILE = declare(File)
AUDIO_TRANSCRIPTION = declare(AudioTranscription)
TEXT_TO_SPEECH = declare(TextToSpeech)

CATALOGUE = {
    d.name: d
    for d in (
        EDIT,
        PROJECT,
        PROJECT_USER,
        PROJECT_SERVICE_ACCOUNT,
        PROJECT_API_KEY,
        RATE_LIMIT,
        ADMIN_API_KEY,
        INVITE,
        ASSISTANT,
        THREAD,
        VECTOR_STORE,
        VECTOR_STORE_FILE,
        FILE,
        AUDIO_TRANSCRIPTION,
        TEXT_TO_SPEECH,
    )
}
