#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the readbin command line.

Every failure of the option parser is reported with one of the classes below.
The parser never hands back a partially populated ``Options``; instead the
first fatal problem is wrapped into a ``ParseResult`` carrying one of these
errors.

Exception Hierarchy
-------------------
- ReadbinError (base exception)

  - OptionsError (command line could not be turned into Options)
    - MissingRequiredArgumentError (the input file is absent)
    - InvalidValueError (value does not convert to the option's domain)
    - UnrecognizedArgumentError (tokens no option accepts)
    - FileNotFoundError (file option names a missing path or a directory)
    - NoOptionsProvidedError (the parse pass produced nothing)
    - ConfigFileError (unreadable or ill-typed --config file)

"""

from typing import Any


class ReadbinError(Exception):
    """Base exception class for all readbin-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class OptionsError(ReadbinError):
    """Exception raised when the command line cannot produce ``Options``.

    Parameters
    ----------
    message : str
        Description of the problem
    option : str, optional
        Option string (or metavar for the positional) the problem refers to
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    option : str or None
        The offending option, if known

    """

    def __init__(self, message: str, option: str | None = None, original_error: Exception | None = None):
        """Initialize the options error with the offending option."""
        super().__init__(message, original_error=original_error)
        self.option = option


class MissingRequiredArgumentError(OptionsError):
    """Exception raised when a required argument is absent."""

    def __init__(self, option: str, message: str | None = None):
        """Initialize the error for the missing ``option``."""
        if message is None:
            message = f"required argument {option} is missing"
        super().__init__(message, option=option)


class InvalidValueError(OptionsError):
    """Exception raised when an option value does not fit its declared domain.

    This covers bad integers and floats, unknown enumeration tags, an option
    given without the value it needs and ambiguous option names.

    Parameters
    ----------
    message : str
        Description of the conversion failure
    option : str, optional
        The option whose value was rejected
    value : any, optional
        The rejected raw value
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        option: str | None = None,
        value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid value error with the rejected value."""
        super().__init__(message, option=option, original_error=original_error)
        self.value = value


class UnrecognizedArgumentError(OptionsError):
    """Exception raised when tokens remain that no option accepts.

    Parameters
    ----------
    arguments : list of str
        The leftover tokens, in command line order

    """

    def __init__(self, arguments: list[str]):
        """Initialize the error with the leftover tokens."""
        super().__init__(f"unrecognized arguments: {' '.join(arguments)}", option=arguments[0] if arguments else None)
        self.arguments = list(arguments)


class FileNotFoundError(OptionsError):
    """Exception raised when a file option names a missing path or a directory.

    Parameters
    ----------
    file_path : str
        The path that failed the check
    option : str, optional
        The option that named the path
    message : str, optional
        Custom error message. If not provided, uses default message

    """

    def __init__(self, file_path: str, option: str | None = None, message: str | None = None):
        """Initialize the file not found error."""
        if message is None:
            message = f"File not found: {file_path}"
        if option is not None:
            message = f"{option}: {message}"
        super().__init__(message, option=option)
        self.file_path = file_path


class NoOptionsProvidedError(OptionsError):
    """Exception raised when the parse pass produced no result at all."""

    def __init__(self, message: str = "no command line options provided"):
        """Initialize the error."""
        super().__init__(message)


class ConfigFileError(OptionsError):
    """Exception raised for an unreadable or ill-formed configuration file.

    Parameters
    ----------
    message : str
        Description of the problem
    config_path : str, optional
        The configuration file being loaded
    key : str, optional
        The configuration key at fault
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        key: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the configuration error."""
        super().__init__(message, option="--config", original_error=original_error)
        self.config_path = config_path
        self.key = key
