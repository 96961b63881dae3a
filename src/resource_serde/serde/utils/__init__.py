from .jsonpointer import JSONPointer  # noqa
from .formatting import compact_json, english_enumerate, format_unix_timestamp  # noqa
