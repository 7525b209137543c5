"""Tests for input validation helpers."""

import pytest

from rsync_watch.security.validation import (
    sanitize_log_input,
    strip_terminal_codes,
    validate_cli_string_input,
    validate_environment_variable_name,
    validate_exclude_pattern,
    validate_file_path,
    validate_hostname,
    validate_remote_path,
)


class TestSanitizeLogInput:
    """Test log sanitization."""

    def test_escapes_line_breaks(self):
        assert sanitize_log_input("a\nb\rc\td") == "a\\nb\\rc\\td"

    def test_removes_ansi_codes(self):
        assert sanitize_log_input("\x1b[31mred\x1b[0m") == "red"

    def test_truncates_long_strings(self):
        result = sanitize_log_input("x" * 2000)
        assert len(result) == 1000
        assert result.endswith("...")

    def test_nested_structures(self):
        assert sanitize_log_input({"cmd": ["a\nb", 3]}) == {"cmd": ["a\\nb", "3"]}


def test_strip_terminal_codes():
    assert strip_terminal_codes("\x1b[1mbold\x1b[0m\r\n") == "bold"


class TestValidateFilePath:
    """Test local path validation."""

    @pytest.mark.parametrize(
        "path",
        ["/src/app", "./app", "~/.ssh/id_rsa", "my app/src", "it's \"quoted\"", "a|b", "$(rm)`", "${HOME}/x"],
    )
    def test_valid_paths(self, path):
        assert validate_file_path(path)

    @pytest.mark.parametrize("path", ["", "  ", "a\x00b", "a\nb", "a\rb", "x" * 5000])
    def test_invalid_paths(self, path):
        assert not validate_file_path(path)

    def test_relative_rejected_when_absolute_required(self):
        assert not validate_file_path("keys/id_rsa", allow_relative=False)
        assert validate_file_path("~/keys/id_rsa", allow_relative=False)


class TestValidateRemoteAndPatterns:
    """Test remote paths, exclude patterns and host names."""

    def test_remote_path(self):
        assert validate_remote_path("/var/www/app")
        assert not validate_remote_path("host:/app")
        assert not validate_remote_path("/app\n")

    def test_exclude_pattern(self):
        assert validate_exclude_pattern("*.log")
        assert validate_exclude_pattern("node modules/")
        assert not validate_exclude_pattern("")
        assert not validate_exclude_pattern("a\nb")

    @pytest.mark.parametrize("host", ["192.168.99.100", "docker.local", "::1", "fe80::1"])
    def test_valid_hosts(self, host):
        assert validate_hostname(host)

    @pytest.mark.parametrize("host", ["", "bad host", "host;rm", "a" * 300])
    def test_invalid_hosts(self, host):
        assert not validate_hostname(host)


class TestValidateCliInput:
    """Test CLI string and variable name checks."""

    def test_cli_string(self):
        assert validate_cli_string_input("web")
        assert not validate_cli_string_input("")
        assert validate_cli_string_input("", allow_empty=True)
        assert not validate_cli_string_input("we\x1bb")
        assert not validate_cli_string_input("x" * 11, max_length=10)

    def test_environment_variable_name(self):
        assert validate_environment_variable_name("RSA_KEY")
        assert not validate_environment_variable_name("1KEY")
        assert not validate_environment_variable_name("KEY-NAME")
