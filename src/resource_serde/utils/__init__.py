from .types import ABSENT, UNSPECIFIED, SentinelType  # noqa
