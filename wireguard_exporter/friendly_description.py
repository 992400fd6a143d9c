"""
Friendly descriptions attached to peers through config comments:

    # friendly_name = Office laptop
    # friendly_json = {"owner": "alice", "id": 42}
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from .errors import InvalidFriendlyJson, UnsupportedHeader

FRIENDLY_NAME = 'friendly_name'
FRIENDLY_JSON = 'friendly_json'

SUPPORTED_TAGS = (FRIENDLY_NAME, FRIENDLY_JSON)


@dataclass(frozen=True)
class FriendlyName:
    name: str


@dataclass(frozen=True)
class FriendlyJson:
    values: Dict[str, Any]


FriendlyDescription = Union[FriendlyName, FriendlyJson]


def escape_label_value(value: str) -> str:
    """Escape a string for use as a Prometheus label value."""
    return value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')


def decode(tag: str, value: str) -> FriendlyDescription:
    """Turn a (tag, value) comment pair into a FriendlyDescription."""
    value = value.strip()

    if tag == FRIENDLY_NAME:
        return FriendlyName(escape_label_value(value))

    if tag == FRIENDLY_JSON:
        try:
            values = json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidFriendlyJson(value, str(e)) from e
        if not isinstance(values, dict):
            raise InvalidFriendlyJson(value, 'expected a JSON object')
        return FriendlyJson(values)

    raise UnsupportedHeader(tag)
