"""Input validation and sanitization utilities."""

import re
from typing import Any


ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_log_input(data: Any) -> Any:
    """Sanitize data before logging to prevent log injection attacks.

    Args:
        data: Data to be logged (string, dict, list, or other types)

    Returns:
        Sanitized data safe for logging
    """
    if isinstance(data, str):
        # Escape line breaks so one subprocess line stays one log record
        sanitized = data.replace('\n', '\\n').replace('\r', '\\r')
        sanitized = sanitized.replace('\t', '\\t')

        # Remove ANSI escape sequences that could be used to manipulate terminal output
        sanitized = ANSI_ESCAPE.sub('', sanitized)

        # Truncate extremely long strings to prevent log flooding
        if len(sanitized) > 1000:
            sanitized = sanitized[:997] + "..."

        return sanitized

    elif isinstance(data, dict):
        return {key: sanitize_log_input(value) for key, value in data.items()}

    elif isinstance(data, list):
        return [sanitize_log_input(item) for item in data]

    else:
        return sanitize_log_input(str(data))


def strip_terminal_codes(line: str) -> str:
    """Remove ANSI escape sequences and trailing line breaks from subprocess output."""
    return ANSI_ESCAPE.sub('', line).rstrip('\r\n')


def validate_file_path(file_path: str, allow_relative: bool = True) -> bool:
    """Validate a local file path.

    Paths are shell-quoted wherever they are used, so only characters that
    cannot be part of a single command-line argument are rejected.

    Args:
        file_path: File path to validate
        allow_relative: Whether to allow relative paths

    Returns:
        True if file path is usable, False otherwise
    """
    if not isinstance(file_path, str) or not file_path.strip():
        return False

    normalized_path = file_path.strip()

    # Check for null bytes and line breaks
    if any(char in normalized_path for char in ('\x00', '\n', '\r')):
        return False

    if not allow_relative and not normalized_path.startswith(('/', '~')):
        return False

    # Check for excessively long paths
    if len(normalized_path) > 4096:
        return False

    return True


def validate_exclude_pattern(pattern: str) -> bool:
    """Validate an rsync/fswatch exclude pattern.

    Patterns are handed to two different tools, so only characters that
    would split or terminate the argument are rejected.

    Args:
        pattern: Exclude pattern to validate

    Returns:
        True if pattern is usable, False otherwise
    """
    if not isinstance(pattern, str) or not pattern.strip():
        return False

    if re.search(r'[\x00\n\r]', pattern):
        return False

    return len(pattern) <= 1024


def validate_remote_path(remote_path: str) -> bool:
    """Validate the destination path on the remote host.

    Args:
        remote_path: Remote volume path

    Returns:
        True if path is valid, False otherwise
    """
    if not isinstance(remote_path, str) or not remote_path.strip():
        return False

    if re.search(r'[\x00-\x1F\x7F]', remote_path):
        return False

    # A colon would make rsync treat the path as another host spec
    if ':' in remote_path:
        return False

    return len(remote_path) <= 4096


def validate_hostname(host: str) -> bool:
    """Validate a hostname or IP address.

    Args:
        host: Hostname, IPv4 or IPv6 address

    Returns:
        True if host is valid, False otherwise
    """
    if not isinstance(host, str) or not host:
        return False

    if len(host) > 253:
        return False

    return bool(re.match(r'^[A-Za-z0-9._:-]+$', host))


def validate_cli_string_input(input_str: str, max_length: int = 1000, allow_empty: bool = False) -> bool:
    """Validate CLI string input for security and length constraints.

    Args:
        input_str: String input to validate
        max_length: Maximum allowed length
        allow_empty: Whether empty strings are allowed

    Returns:
        True if input is valid, False otherwise
    """
    if not isinstance(input_str, str):
        return False

    if not allow_empty and not input_str.strip():
        return False

    if len(input_str) > max_length:
        return False

    # Check for control characters
    if re.search(r'[\x00-\x1F\x7F]', input_str):
        return False

    return True


def validate_environment_variable_name(var_name: str) -> bool:
    """Validate environment variable name format.

    Args:
        var_name: Environment variable name to validate

    Returns:
        True if variable name is valid, False otherwise
    """
    if not isinstance(var_name, str) or not var_name:
        return False

    # Letters, digits, and underscores only, cannot start with digit
    if not re.match(r'^[A-Za-z_][A-Za-z0-9_]*$', var_name):
        return False

    return len(var_name) <= 255
