"""Tests for the readbin exception hierarchy."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import pytest

from readbin.exceptions import (
    ConfigFileError,
    FileNotFoundError,
    InvalidValueError,
    MissingRequiredArgumentError,
    NoOptionsProvidedError,
    OptionsError,
    ReadbinError,
    UnrecognizedArgumentError,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Every parse failure is an OptionsError and a ReadbinError."""

    @pytest.mark.parametrize(
        "error",
        [
            MissingRequiredArgumentError("FILE"),
            InvalidValueError("bad value", option="--byteweight-length", value="abc"),
            UnrecognizedArgumentError(["--bogus"]),
            FileNotFoundError("/nonexistent", option="--syms"),
            NoOptionsProvidedError(),
            ConfigFileError("broken", config_path="bap.toml"),
        ],
    )
    def test_subclasses_options_error(self, error):
        """Test that each failure category derives from OptionsError."""
        assert isinstance(error, OptionsError)
        assert isinstance(error, ReadbinError)
        assert str(error) == error.message

    def test_file_not_found_is_not_builtin(self):
        """Test that the readbin error does not masquerade as the builtin one."""
        import builtins

        assert not issubclass(FileNotFoundError, builtins.FileNotFoundError)

    def test_original_error_is_kept(self):
        """Test that a wrapped exception stays reachable."""
        cause = ValueError("invalid literal")
        error = InvalidValueError("bad", option="--byteweight-length", original_error=cause)
        assert error.original_error is cause


@pytest.mark.unit
class TestExceptionMessages:
    """Test the default messages of the exceptions."""

    def test_missing_required_argument(self):
        """Test the message names the missing argument."""
        error = MissingRequiredArgumentError("FILE")
        assert error.option == "FILE"
        assert "FILE" in error.message
        assert "missing" in error.message

    def test_unrecognized_arguments(self):
        """Test the leftover tokens are listed in order."""
        error = UnrecognizedArgumentError(["--bogus", "extra"])
        assert error.arguments == ["--bogus", "extra"]
        assert error.option == "--bogus"
        assert error.message == "unrecognized arguments: --bogus extra"

    def test_file_not_found_with_option(self):
        """Test the option is prefixed to the message."""
        error = FileNotFoundError("/nonexistent", option="--syms")
        assert error.file_path == "/nonexistent"
        assert error.message == "--syms: File not found: /nonexistent"

    def test_file_not_found_custom_message(self):
        """Test a custom message replaces the default."""
        error = FileNotFoundError("/tmp", option="FILE", message="/tmp is a directory, not a file")
        assert error.message == "FILE: /tmp is a directory, not a file"

    def test_config_file_error_fields(self):
        """Test the configuration error remembers the file and key."""
        error = ConfigFileError("bad key", config_path="bap.yaml", key="bogus")
        assert error.option == "--config"
        assert error.config_path == "bap.yaml"
        assert error.key == "bogus"

    def test_no_options_provided_default(self):
        """Test the default message of the empty parse failure."""
        assert NoOptionsProvidedError().message == "no command line options provided"
