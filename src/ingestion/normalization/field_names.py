"""
Field name escaping for Mixpanel property names.

Mixpanel properties carry names such as "$os", "$browser_version" or
"Plan Type". Output schemas only accept identifiers made of letters,
digits and underscores that do not start with a digit, so every remote
name goes through escape_field_name() before it becomes a schema field.
"""

import re

EVENT_NAME_FIELD = "event_name"
EVENT_NAME_PROPERTY = "$event_name"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_EDGE_UNDERSCORES = re.compile(r"^_+|_+$")
_VALID_FIELD_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def escape_field_name(raw_name: str) -> str:
    """
    Map a remote property name to a safe schema field name.

    Rules, in order:
    - "$event_name" becomes "event_name"
    - every character outside [A-Za-z0-9_] becomes "_"
    - leading and trailing underscores are stripped
    - a leading digit gets a "_" prefix

    Args:
        raw_name: Property name as reported by Mixpanel

    Returns:
        Escaped field name. Empty if the name held no letters or digits.

    Example:
        >>> escape_field_name("$$$$$mega_field$$$$")
        'mega_field'
        >>> escape_field_name("1 Starts With number")
        '_1_Starts_With_number'
    """
    if raw_name == EVENT_NAME_PROPERTY:
        return EVENT_NAME_FIELD

    name = _UNSAFE_CHARS.sub("_", raw_name)
    name = _EDGE_UNDERSCORES.sub("", name)
    if name and name[0].isdigit():
        name = "_" + name
    return name


def is_valid_field_name(name: str) -> bool:
    """Return True if name can be used as a schema field."""
    return _VALID_FIELD_NAME.fullmatch(name) is not None
