from .client import ProviderClient, build_client  # noqa
from .config import ProviderSettings  # noqa
from .declarative import Attr, declare  # noqa
from .exceptions import (  # noqa
    Failure,
    InvalidDeclarationError,
    InvalidIdentityError,
    PartialWriteError,
    ResourceSerdeException,
)
from .mapper import ResourceMapper, ResourceState  # noqa
from .models import CredentialContext, FailureKind, OperationDescriptor, Page  # noqa
from .pagination import Cursor  # noqa
