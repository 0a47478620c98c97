"""Closed value sets shared by records and requests."""

from enum import Enum
from typing import Type, TypeVar

from help_system.core.exceptions import InvalidArgumentError


class Role(str, Enum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    STUDENT = "student"


class Level(str, Enum):
    """Article difficulty; also used for a user's skill level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class AccessLevel(str, Enum):
    PUBLIC = "public"
    RESTRICTED = "restricted"


class Capability(str, Enum):
    """Per-group capability bits of a membership."""

    ADMIN = "admin"
    VIEWING = "viewing"


class RestoreMode(str, Enum):
    REPLACE = "replace"
    MERGE = "merge"


E = TypeVar("E", bound=Enum)


def parse_choice(enum_cls: Type[E], value, field: str) -> E:
    """Coerce a raw value into a member of ``enum_cls``.

    Args:
        enum_cls: Target enum.
        value: Raw value (enum member or its string value).
        field: Field name used in the error message.

    Returns:
        The matching enum member.

    Raises:
        InvalidArgumentError: If the value is not one of the allowed choices.
    """
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgumentError(
            f"Invalid {field}: {value!r}. Must be one of: {allowed}."
        ) from None
