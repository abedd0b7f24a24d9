"""Normalization of constrained query parameters (``sort_by``, ``status``)."""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from recharge_cli.core.client import ValidationError


def allowed_values(enum_cls: type[Enum]) -> list[str]:
    """Canonical string values for every member of ``enum_cls``."""
    return [str(member.value) for member in enum_cls]


def normalize_choice(params: Mapping[str, Any], key: str, enum_cls: type[Enum]) -> dict[str, Any]:
    """
    Return a copy of ``params`` where ``params[key]`` is a legal value of ``enum_cls``.

    Enum members are replaced by their value without further checks. Strings
    are resolved through the enum constructor, so enums that override
    ``_missing_`` (the case-insensitive status enums) get their aliasing.

    Raises:
        ValidationError: If the value is not legal for ``enum_cls``

    """
    result = dict(params)
    value = result.get(key)
    if value is None:
        return result

    if isinstance(value, Enum):
        result[key] = value.value
        return result

    if isinstance(value, str):
        try:
            result[key] = enum_cls(value).value
            return result
        except ValueError:
            pass

    raise ValidationError(
        f'Invalid {key} value "{value}". Allowed values: {", ".join(allowed_values(enum_cls))}',
        details={"parameter": key, "allowed": allowed_values(enum_cls)},
    )


def normalize_sort(params: Mapping[str, Any], sort_enum: type[Enum]) -> dict[str, Any]:
    """Validate and canonicalize ``sort_by`` against ``sort_enum``."""
    return normalize_choice(params, "sort_by", sort_enum)
