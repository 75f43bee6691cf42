"""
Extract the human-readable message from a breaking-change marker.
"""

from typing import Any

from upcoming_changes.exceptions import MarkerContractError


def extract_message(attribute: Any) -> str:
    """
    Return the breaking-change message of one marker attribute.

    The message is looked up in this order:

    1. A non-empty ``change_description`` field, returned trimmed
    2. A ``describe()`` method returning the message
    3. A ``print_info(write)`` method that calls ``write`` with message
       fragments; the fragments are concatenated in call order

    Args:
        attribute: Marker instance

    Returns:
        Message string

    Raises:
        MarkerContractError: If the attribute supports none of the above
    """
    description = getattr(attribute, "change_description", None)
    if isinstance(description, str) and description.strip():
        return description.strip()

    describe = getattr(attribute, "describe", None)
    if callable(describe):
        return describe()

    print_info = getattr(attribute, "print_info", None)
    if callable(print_info):
        fragments: list[str] = []
        print_info(fragments.append)
        return "".join(fragments)

    raise MarkerContractError(
        type(attribute).__name__, "neither describe() nor print_info() is available"
    )
