"""
Validation and error handling for the perfnorm package.

This module provides input validation and the exception hierarchy used to
report configuration problems, profiler failures and malformed traces.
"""

from .exceptions import (
    ErrorSeverity,
    ProfilerError,
    TraceFormatError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
    handle_subprocess_error,
)

from .validators import (
    validate_enum_choice,
    validate_event_names,
    validate_path_exists,
    validate_positive_float,
    validate_positive_integer,
    validate_window_override,
)

__all__ = [
    # Exceptions and handlers
    "ErrorSeverity",
    "ProfilerError",
    "TraceFormatError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_file_error",
    "handle_subprocess_error",
    # Validators
    "validate_enum_choice",
    "validate_event_names",
    "validate_path_exists",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_window_override",
]
