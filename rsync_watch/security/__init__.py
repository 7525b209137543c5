"""Security utilities for input validation and sanitization."""

from .validation import (
    sanitize_log_input,
    strip_terminal_codes,
    validate_cli_string_input,
    validate_environment_variable_name,
    validate_exclude_pattern,
    validate_file_path,
    validate_hostname,
    validate_remote_path,
)

__all__ = [
    "sanitize_log_input",
    "strip_terminal_codes",
    "validate_cli_string_input",
    "validate_environment_variable_name",
    "validate_exclude_pattern",
    "validate_file_path",
    "validate_hostname",
    "validate_remote_path",
]
