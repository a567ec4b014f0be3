from collections.abc import Mapping
from enum import Enum
from typing import Any

Timeout = float | int

Headers = dict[str, str]
HeaderMapping = Mapping[str, str]

# Anything pydantic-core can serialize: dataclasses, models, mappings, lists...
Parameters = Any

# No query string and no request body.
EMPTY: Any = object()


def is_empty(parameters: Parameters) -> bool:
    return parameters is None or parameters is EMPTY


class ContentType(Enum):
    json = "json"
    form_urlencoded = "form_urlencoded"
    multipart = "multipart"
