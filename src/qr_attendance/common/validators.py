from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text.")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required.")
    return value.strip()


def optional_text(value: Any, field_name: str = "Value") -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text.")
    value = value.strip()
    return value or None


def require_object(data: Any) -> dict:
    """JSON request bodies must be objects; a missing body counts as empty."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data
