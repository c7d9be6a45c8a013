"""
Validation functions for configuration values and command-line input.
"""

import os
from pathlib import Path
from typing import Any, List, Optional, Union

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within the given bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within the given bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated float value

    Raises:
        ValidationError: If validation fails
    """
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_window_override(value: Any, field_name: str = "window") -> int:
    """
    Validate a delay/length override in milliseconds.

    ``-1`` means "derive from the trial window"; anything else must be a
    non-negative integer.
    """
    int_value = validate_positive_integer(value, min_value=-1, field_name=field_name)
    return int_value


def validate_path_exists(path: Union[str, Path], field_name: str = "path") -> str:
    """
    Validate that a path exists.

    Args:
        path: Path to validate
        field_name: Name of the field being validated

    Returns:
        Validated path string

    Raises:
        ValidationError: If path doesn't exist
    """
    path_str = str(path)
    if not os.path.exists(path_str):
        raise ValidationError(
            f"{field_name} does not exist: {path_str}",
            field_name=field_name,
            value=path_str
        )
    return path_str


def validate_event_names(
    events: Union[str, List[str]],
    field_name: str = "events"
) -> List[str]:
    """
    Validate a list of profiler event names.

    Accepts either a list or a comma-separated string (e.g. ``"cycles,instructions"``).
    Duplicates are dropped, keeping the first occurrence.

    Raises:
        ValidationError: If the list is empty or contains blank names
    """
    if isinstance(events, str):
        events = [e.strip() for e in events.split(",")]

    if not isinstance(events, list) or not events:
        raise ValidationError(
            f"{field_name} must be a non-empty list of event names",
            field_name=field_name,
            value=events
        )

    validated: List[str] = []
    for i, event in enumerate(events):
        if not isinstance(event, str) or not event.strip():
            raise ValidationError(
                f"{field_name} item {i} must be a non-empty string",
                field_name=field_name,
                value=event
            )
        if event.strip() not in validated:
            validated.append(event.strip())
    return validated


def validate_enum_choice(
    value: Any,
    valid_choices: List[str] = None,
    choices: List[str] = None,
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        valid_choices: List of allowed choices
        choices: Alias of ``valid_choices``
        field_name: Name of the field being validated
        case_sensitive: Whether the comparison should be case-sensitive

    Returns:
        Validated choice, in the spelling used by ``valid_choices``

    Raises:
        ValidationError: If value is not in choices
    """
    choice_list = valid_choices or choices
    if choice_list is None:
        raise ValidationError(
            f"No valid choices provided for {field_name}",
            field_name=field_name,
            value=value
        )

    str_value = str(value)

    if case_sensitive:
        if str_value not in choice_list:
            raise ValidationError(
                f"{field_name} must be one of {choice_list}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choice_list]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choice_list}, got {value}",
            field_name=field_name,
            value=value
        )
    return choice_list[lower_choices.index(lower_value)]
