import dataclasses
import logging
import typing
import uuid

from . import identity as identity_codec
from .client import ProviderClient
from .declarative import placeholders
from .exceptions import (
    FileUnavailableError,
    MalformedOperationError,
    MalformedResponseError,
    NotFoundError,
    PartialWriteError,
)
from .interfaces import CancelSignal
from .models import (
    Body,
    CredentialContext,
    Endpoint,
    FileField,
    MultipartBody,
    Operation,
    OperationDescriptor,
    Page,
    ResourceAttributeDescriptor,
    ResourceDescriptor,
)
from .pagination import Cursor, PaginationWalker
from .projector import AttributeSet, StateProjector, flatten_items
from .serde.types import NormalizedValue
from .utils import UNSPECIFIED

Inputs = typing.Mapping[str, typing.Any]


def _supplied(inputs: Inputs, name: str) -> bool:
    return inputs.get(name, UNSPECIFIED) is not UNSPECIFIED


@dataclasses.dataclass
class ResourceState:
    identifier: str
    attributes: AttributeSet
    # the response body of entities declared with raw_response
    content: typing.Optional[bytes] = None


class ResourceMapper:
    """
    Performs the CRUD and list call sites of one declared entity on top of a
    :py:class:`ProviderClient`.

    Inputs are plain mappings from attribute names to values.  An attribute that does not
    appear in the mapping (or is :py:data:`UNSPECIFIED`) is never sent; ``None`` is sent as
    an explicit ``null`` only for attributes declared with ``allow_null``.

    :param ResourceDescriptor descriptor: the entity declaration.
    :param ProviderClient client: the client that carries out the operations.
    """

    descriptor: ResourceDescriptor
    client: ProviderClient
    projector: StateProjector
    logger: logging.Logger

    def create(
        self, inputs: Inputs, cancel: typing.Optional[CancelSignal] = None
    ) -> ResourceState:
        """
        Creates the object and projects the response onto the state.

        :raises MalformedOperationError: if a required attribute is missing.
        :raises InvalidIdentityError: if a parent identity input cannot be part of an
                identifier; nothing is sent in that case.
        :raises PartialWriteError: if the object was created but the response could not
                be projected in full.
        """
        endpoint = self.endpoint(Operation.CREATE)
        self.check_inputs(inputs)
        missing = [
            a.name
            for a in self.descriptor.attributes.values()
            if a.required_on_creation and inputs.get(a.name, UNSPECIFIED) in (UNSPECIFIED, None)
        ]
        if missing:
            raise MalformedOperationError.missing("required attributes", missing)
        parents = [
            str(inputs[name]) if inputs.get(name, UNSPECIFIED) not in (UNSPECIFIED, None) else ""
            for name in self.descriptor.identity
        ]
        identity_codec.check_segments(parents)

        op = self.operation(
            endpoint,
            path_params=self.path_params_from_inputs(endpoint, inputs),
            body=self.build_body(inputs, endpoint.method),
            inputs=inputs,
        )
        value = self.client.execute(op, cancel=cancel, credentials=self.credentials_for(inputs))
        if self.descriptor.raw_response:
            content = typing.cast(bytes, value)
            self.write_output(inputs, content)
            identifier = identity_codec.encode(parents + [self.mint_id()])
            self.logger.debug("created %s %s", self.descriptor.name, identifier)
            return ResourceState(
                identifier=identifier, attributes=self.seed(inputs), content=content
            )

        obj = self.client.decoder.require_object(value)
        child = self.mint_id() if self.descriptor.local_identity else self.provider_id(obj)
        identifier = identity_codec.encode(parents + [child])
        attributes = self.seed(inputs)
        try:
            self.projector.project(obj, self.descriptor.projected_attributes, attributes)
        except MalformedResponseError as e:
            raise PartialWriteError(identifier, attributes) from e
        self.logger.debug("created %s %s", self.descriptor.name, identifier)
        return ResourceState(identifier=identifier, attributes=attributes)

    def read(
        self,
        identifier: str,
        override_token: typing.Optional[str] = None,
        cancel: typing.Optional[CancelSignal] = None,
    ) -> typing.Optional[ResourceState]:
        """
        Reads the current state of the object.

        :return: the state, or ``None`` when the provider no longer knows the object.
        """
        endpoint = self.endpoint(Operation.READ)
        segments = self.decode(identifier)
        op = self.operation(endpoint, path_params=segments)
        try:
            value = self.client.execute(
                op, cancel=cancel, credentials=self.credentials(override_token)
            )
        except NotFoundError:
            self.logger.debug("%s %s is gone", self.descriptor.name, identifier)
            return None
        attributes: AttributeSet = dict(zip(self.descriptor.identity, segments))
        self.projector.project(
            self.client.decoder.require_object(value),
            self.descriptor.projected_attributes,
            attributes,
        )
        return ResourceState(identifier=identifier, attributes=attributes)

    def update(
        self,
        identifier: str,
        inputs: Inputs,
        cancel: typing.Optional[CancelSignal] = None,
    ) -> ResourceState:
        """
        Sends the supplied inputs, and only those, to the update endpoint.
        """
        endpoint = self.endpoint(Operation.UPDATE)
        self.check_inputs(inputs)
        segments = self.decode(identifier)
        op = self.operation(
            endpoint,
            path_params=segments,
            body=self.build_body(inputs, endpoint.method),
            inputs=inputs,
        )
        value = self.client.execute(op, cancel=cancel, credentials=self.credentials_for(inputs))
        attributes = self.seed(inputs)
        attributes.update(zip(self.descriptor.identity, segments))
        if value is not None:
            self.projector.project(
                self.client.decoder.require_object(value),
                self.descriptor.projected_attributes,
                attributes,
            )
        return ResourceState(identifier=identifier, attributes=attributes)

    def delete(
        self,
        identifier: str,
        override_token: typing.Optional[str] = None,
        cancel: typing.Optional[CancelSignal] = None,
    ) -> bool:
        """
        :return: ``False`` when the object was already gone.
        """
        endpoint = self.endpoint(Operation.DELETE)
        op = self.operation(endpoint, path_params=self.decode(identifier))
        try:
            self.client.execute(op, cancel=cancel, credentials=self.credentials(override_token))
        except NotFoundError:
            self.logger.debug("%s %s was already gone", self.descriptor.name, identifier)
            return False
        return True

    def list_page(
        self,
        inputs: typing.Optional[Inputs] = None,
        cursor: typing.Optional[Cursor] = None,
        cancel: typing.Optional[CancelSignal] = None,
    ) -> Page:
        """
        Fetches one page and projects every item onto its own attribute set.
        """
        inputs = inputs or {}
        op = self.list_operation(inputs)
        page = self.walker.list_page(
            op, cursor, cancel=cancel, credentials=self.credentials_for(inputs)
        )
        return self.project_page(page)

    def iter_pages(
        self,
        inputs: typing.Optional[Inputs] = None,
        cursor: typing.Optional[Cursor] = None,
        cancel: typing.Optional[CancelSignal] = None,
    ) -> typing.Iterator[Page]:
        inputs = inputs or {}
        op = self.list_operation(inputs)
        for page in self.walker.iter_pages(
            op, cursor, cancel=cancel, credentials=self.credentials_for(inputs)
        ):
            yield self.project_page(page)

    @property
    def walker(self) -> PaginationWalker:
        return PaginationWalker(self.client, self.client.decoder)

    def list_operation(self, inputs: Inputs) -> OperationDescriptor:
        endpoint = self.endpoint(Operation.LIST)
        self.check_inputs(inputs)
        return self.operation(
            endpoint, path_params=self.path_params_from_inputs(endpoint, inputs), inputs=inputs
        )

    def project_page(self, page: Page) -> Page:
        return dataclasses.replace(
            page,
            items=flatten_items(self.projector, page.items, self.descriptor.projected_attributes),
        )

    def endpoint(self, op: Operation) -> Endpoint:
        endpoint = self.descriptor.endpoint(op)
        if endpoint is None:
            raise MalformedOperationError.from_message(
                f"{self.descriptor.name} does not support {op.value}"
            )
        return endpoint

    def operation(
        self,
        endpoint: Endpoint,
        path_params: typing.Sequence[str],
        body: Body = None,
        inputs: typing.Optional[Inputs] = None,
    ) -> OperationDescriptor:
        return OperationDescriptor(
            method=endpoint.method,
            path=endpoint.path,
            path_params=path_params,
            body=body,
            headers=self.build_headers(inputs or {}),
            beta=self.descriptor.beta,
            raw_response=self.descriptor.raw_response,
            nullable=frozenset(
                a.wire_name for a in self.descriptor.attributes.values() if a.allow_null
            ),
        )

    def check_inputs(self, inputs: Inputs) -> None:
        unknown = [name for name in inputs if name not in self.descriptor.attributes]
        if unknown:
            raise MalformedOperationError.from_message(
                f"{self.descriptor.name} has no attributes named {', '.join(unknown)}"
            )
        read_only = [
            name
            for name in inputs
            if self.descriptor.attributes[name].read_only and _supplied(inputs, name)
        ]
        if read_only:
            raise MalformedOperationError.from_message(
                f"read-only attributes cannot be set: {', '.join(read_only)}"
            )

    def path_params_from_inputs(self, endpoint: Endpoint, inputs: Inputs) -> typing.List[str]:
        # empty strings are reported as missing by the request builder
        return [
            str(inputs[name]) if inputs.get(name, UNSPECIFIED) not in (UNSPECIFIED, None) else ""
            for name in placeholders(endpoint.path)
        ]

    def body_attributes(self) -> typing.Iterator[ResourceAttributeDescriptor]:
        special = set(self.descriptor.header_attributes)
        special.add(self.descriptor.override_token_attribute or "")
        special.add(self.descriptor.file_attribute or "")
        special.add(self.descriptor.output_attribute or "")
        for a in self.descriptor.attributes.values():
            if a.writable and a.body and a.name not in special:
                yield a

    def build_body(self, inputs: Inputs, method: str) -> Body:
        fields = [
            (a.wire_name, inputs[a.name])
            for a in self.body_attributes()
            if _supplied(inputs, a.name)
        ]
        if self.descriptor.file_attribute is not None:
            path = inputs.get(self.descriptor.file_attribute, UNSPECIFIED)
            if path in (UNSPECIFIED, None):
                raise MalformedOperationError.missing(
                    "attributes", [self.descriptor.file_attribute]
                )
            return MultipartBody(
                file=FileField(path=path),
                fields=[(name, value) for name, value in fields if value is not None],
            )
        if not fields and method in ("GET", "DELETE"):
            return None
        return dict(fields)

    def build_headers(self, inputs: Inputs) -> typing.Dict[str, str]:
        return {
            header: str(inputs[name])
            for name, header in self.descriptor.header_attributes.items()
            if inputs.get(name, UNSPECIFIED) not in (UNSPECIFIED, None)
        }

    def credentials(
        self, override_token: typing.Optional[str]
    ) -> typing.Optional[CredentialContext]:
        if not override_token:
            return None
        return self.client.credentials.with_override(override_token)

    def credentials_for(self, inputs: Inputs) -> typing.Optional[CredentialContext]:
        name = self.descriptor.override_token_attribute
        if name is None:
            return None
        token = inputs.get(name, UNSPECIFIED)
        return self.credentials(token if isinstance(token, str) else None)

    def decode(self, identifier: str) -> typing.List[str]:
        return identity_codec.decode(identifier, len(self.descriptor.identity) + 1)

    def mint_id(self) -> str:
        return f"{self.descriptor.name}-{uuid.uuid4().hex}"

    def write_output(self, inputs: Inputs, content: bytes) -> None:
        name = self.descriptor.output_attribute
        if name is None:
            return
        path = inputs.get(name, UNSPECIFIED)
        if path in (UNSPECIFIED, None):
            return
        try:
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise FileUnavailableError.from_message(
                f"cannot write {path}: {e.strerror or e}"
            ) from e

    def provider_id(self, obj: typing.Mapping[str, NormalizedValue]) -> str:
        value = self.descriptor.id_source.resolve(obj)
        if not isinstance(value, str) or not value:
            raise MalformedResponseError.collected(
                [(self.descriptor.id_source, "the response carries no object id")]
            )
        return value

    def seed(self, inputs: Inputs) -> AttributeSet:
        return {
            name: value
            for name, value in inputs.items()
            if value is not UNSPECIFIED
            and value is not None
            and name != self.descriptor.override_token_attribute
        }

    def __init__(
        self,
        descriptor: ResourceDescriptor,
        client: ProviderClient,
        projector: typing.Optional[StateProjector] = None,
        logger: typing.Optional[logging.Logger] = None,
    ):
        self.descriptor = descriptor
        self.client = client
        self.projector = projector if projector is not None else StateProjector(client.decoder)
        self.logger = logger if logger is not None else client.logger
