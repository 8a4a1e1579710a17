"""
Boundary validation helpers.

Every public query and command validates its scalar arguments here before
touching data, so malformed input fails fast with InvalidArgumentError.
"""

from uuid import UUID

from commerce_kernel.exceptions import InvalidArgumentError


def validate_limit(limit: object, maximum: int, argument: str = "limit") -> int:
    """Return ``limit`` if it is an int in ``[1, maximum]``."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError(argument, f"must be an integer, got {limit!r}")
    if limit < 1:
        raise InvalidArgumentError(argument, f"must be >= 1, got {limit}")
    if limit > maximum:
        raise InvalidArgumentError(argument, f"must be <= {maximum}, got {limit}")
    return limit


def validate_positive_grams(grams: object, argument: str = "grams") -> int:
    """Return ``grams`` if it is an int > 0."""
    if isinstance(grams, bool) or not isinstance(grams, int):
        raise InvalidArgumentError(argument, f"must be an integer, got {grams!r}")
    if grams <= 0:
        raise InvalidArgumentError(argument, f"must be > 0, got {grams}")
    return grams


def validate_non_negative(value: object, argument: str) -> int:
    """Return ``value`` if it is an int >= 0."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(argument, f"must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgumentError(argument, f"must be >= 0, got {value}")
    return value


def parse_uuid(value: object, argument: str = "id") -> UUID:
    """Return ``value`` as a UUID, accepting UUID instances or their string form."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise InvalidArgumentError(argument, f"must be a UUID, got {value!r}")
    try:
        return UUID(value)
    except ValueError as exc:
        raise InvalidArgumentError(argument, f"must be a UUID, got {value!r}") from exc
