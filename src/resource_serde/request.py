"""
:py:mod:`resource_serde.request` turns an :py:class:`OperationDescriptor` and a
:py:class:`CredentialContext` into a fully formed :py:class:`httpx.Request`.

Synopsis
--------

.. code-block:: python

   builder = RequestBuilder()

   request = builder.build(
       OperationDescriptor(
           method="GET",
           path="/v1/organization/projects/{project_id}/service_accounts/{id}",
           path_params=["proj_abc", "svc_123"],
       ),
       CredentialContext(base_url="https://api.openai.com/v1", token="sk-..."),
   )
   assert str(request.url) == (
       "https://api.openai.com/v1/organization/projects/proj_abc/service_accounts/svc_123"
   )

"""

import collections.abc
import json
import mimetypes
import os
import string
import typing
import urllib.parse

import httpx

from .exceptions import FileUnavailableError, MalformedOperationError
from .models import (
    CredentialContext,
    FileField,
    FormValue,
    MultipartBody,
    OperationDescriptor,
    QueryValue,
)
from .utils import UNSPECIFIED

VERSION_SEGMENT = "/v1"
BETA_HEADER = ("OpenAI-Beta", "assistants=v2")
ORGANIZATION_HEADER = "OpenAI-Organization"

_formatter = string.Formatter()


def _render_scalar(value: typing.Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_list(value: typing.Any) -> bool:
    return isinstance(value, collections.abc.Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def _list_name(name: str) -> str:
    return name if name.endswith("[]") else name + "[]"


def _expand_pairs(
    pairs: typing.Iterable[typing.Tuple[str, typing.Union[QueryValue, FormValue]]]
) -> typing.List[typing.Tuple[str, str]]:
    result: typing.List[typing.Tuple[str, str]] = []
    for name, value in pairs:
        if value is None or value is UNSPECIFIED:
            continue
        if _is_list(value):
            list_name = _list_name(name)
            result.extend(
                (list_name, _render_scalar(v)) for v in typing.cast(typing.Sequence, value)
            )
        else:
            result.append((name, _render_scalar(value)))
    return result


def _strip_unspecified(value: typing.Any) -> typing.Any:
    # nested nulls belong to the caller and go over the wire as they are
    if isinstance(value, collections.abc.Mapping):
        return {k: _strip_unspecified(v) for k, v in value.items() if v is not UNSPECIFIED}
    elif _is_list(value):
        return [_strip_unspecified(v) for v in value if v is not UNSPECIFIED]
    return value


class RequestBuilder:
    version_segment: str
    beta_header: typing.Tuple[str, str]
    organization_header: str

    def build(self, op: OperationDescriptor, cred: CredentialContext) -> httpx.Request:
        url = self.build_url(op, cred)
        headers = self.build_headers(op, cred)
        params = self.encode_query(op.query_params)
        method = op.method.upper()

        if op.body is None:
            request = httpx.Request(method, url, params=params, headers=headers)
        elif isinstance(op.body, MultipartBody):
            request = httpx.Request(
                method, url, params=params, headers=headers, files=self.encode_multipart(op.body)
            )
        elif isinstance(op.body, (bytes, bytearray)):
            headers.setdefault("Content-Type", "application/octet-stream")
            request = httpx.Request(
                method, url, params=params, headers=headers, content=bytes(op.body)
            )
        elif isinstance(op.body, collections.abc.Mapping):
            headers["Content-Type"] = "application/json"
            request = httpx.Request(
                method,
                url,
                params=params,
                headers=headers,
                content=self.encode_json_body(op.body, op.nullable),
            )
        else:
            raise MalformedOperationError.from_message(
                f"unsupported request body of type {type(op.body).__name__}"
            )
        # materializes the body; the multipart writer is closed from here on
        request.read()
        return request

    def __call__(self, op: OperationDescriptor, cred: CredentialContext) -> httpx.Request:
        return self.build(op, cred)

    def render_path(self, template: str, params: typing.Sequence[str]) -> str:
        if isinstance(params, str):
            raise TypeError("path parameters must be a sequence of strings")
        parsed = list(_formatter.parse(template))
        names = [field for _, field, _, _ in parsed if field is not None]
        missing = [
            name or str(i)
            for i, name in enumerate(names)
            if i >= len(params) or params[i] is None or params[i] == ""
        ]
        if missing:
            raise MalformedOperationError.missing("path parameters", missing)
        if len(params) > len(names):
            raise MalformedOperationError.from_message(
                f"{len(params)} path parameters given for {len(names)} placeholders in {template}"
            )
        buf = []
        i = 0
        for literal, field, _, _ in parsed:
            buf.append(literal)
            if field is not None:
                buf.append(urllib.parse.quote(str(params[i]), safe=""))
                i += 1
        return "".join(buf)

    def build_url(self, op: OperationDescriptor, cred: CredentialContext) -> str:
        path = self.render_path(op.path, op.path_params)
        if path.startswith(("http://", "https://")):
            return path

        version = self.version_segment
        base = cred.base_url.rstrip("/")
        if base.endswith(version):
            base = base[: -len(version)]
        if not path.startswith("/"):
            path = "/" + path
        if path == version or path.startswith(version + "/"):
            path = path[len(version) :]
        return base + version + path

    def build_headers(
        self, op: OperationDescriptor, cred: CredentialContext
    ) -> typing.Dict[str, str]:
        token = cred.effective_token
        if not token:
            raise MalformedOperationError.from_message("no bearer token available")
        headers = {"Accept": "application/json"}
        headers.update(op.headers)
        headers["Authorization"] = f"Bearer {token}"
        if cred.organization_id:
            headers[self.organization_header] = cred.organization_id
        if op.beta:
            name, value = self.beta_header
            headers[name] = value
        return headers

    def encode_query(
        self, params: typing.Sequence[typing.Tuple[str, QueryValue]]
    ) -> typing.List[typing.Tuple[str, str]]:
        return _expand_pairs(params)

    def encode_json_body(
        self, body: typing.Mapping[str, typing.Any], nullable: typing.Collection[str] = ()
    ) -> bytes:
        document: typing.Dict[str, typing.Any] = {}
        for name, value in body.items():
            if value is UNSPECIFIED:
                continue
            if value is None:
                if name in nullable:
                    document[name] = None
                continue
            document[name] = _strip_unspecified(value)
        return json.dumps(document, separators=(",", ":")).encode("utf-8")

    def encode_multipart(
        self, body: MultipartBody
    ) -> typing.List[
        typing.Tuple[str, typing.Tuple[typing.Optional[str], bytes, typing.Optional[str]]]
    ]:
        """
        Lays out the multipart parts: the form fields in the given order (repeated names
        included), then the file part.  Form fields are parts without a filename, which
        httpx renders as plain ``form-data`` values.
        """
        parts: typing.List[
            typing.Tuple[str, typing.Tuple[typing.Optional[str], bytes, typing.Optional[str]]]
        ] = []
        for name, value in _expand_pairs(body.fields):
            if name == body.file.name:
                raise MalformedOperationError.from_message(
                    f'form field "{body.file.name}" collides with the file part'
                )
            parts.append((name, (None, value.encode("utf-8"), None)))
        parts.append((body.file.name, self.read_file(body.file)))
        return parts

    def read_file(self, file: FileField) -> typing.Tuple[str, bytes, str]:
        path = os.fspath(file.path)
        try:
            with open(path, "rb") as f:
                content = f.read()
        except OSError as e:
            raise FileUnavailableError.from_message(
                f"cannot read {path}: {e.strerror or e}"
            ) from e
        content_type = file.content_type
        if content_type is None:
            content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        return os.path.basename(path), content, content_type

    def __init__(
        self,
        version_segment: str = VERSION_SEGMENT,
        beta_header: typing.Tuple[str, str] = BETA_HEADER,
        organization_header: str = ORGANIZATION_HEADER,
    ):
        self.version_segment = "/" + version_segment.strip("/")
        self.beta_header = beta_header
        self.organization_header = organization_header
