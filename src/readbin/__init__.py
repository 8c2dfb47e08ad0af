"""readbin - command line front end of the Binary Analysis Platform.

readbin owns the ``bap`` command line: the table of every accepted flag, its
defaults and validation rules, and a two-pass parse that lets plugins loaded
with ``-l NAME`` receive their own ``--NAME-*`` flags without the fixed schema
rejecting them. The result is a frozen ``Options`` value handed to the
analysis pipeline, which is not part of this package.

Examples
--------
>>> from readbin import parse_options
>>> result = parse_options(["/bin/ls", "--dump", "--dump=bil"])
>>> [str(fmt) for fmt in result.options.dump]
['asm', 'bil']

"""

import sys

# Check Python version before any imports
if sys.version_info < (3, 10):
    raise RuntimeError(
        f"readbin requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from readbin.cli.builder import ParseResult, parse_options  # noqa: E402
from readbin.exceptions import (  # noqa: E402
    ConfigFileError,
    FileNotFoundError,
    InvalidValueError,
    MissingRequiredArgumentError,
    NoOptionsProvidedError,
    OptionsError,
    ReadbinError,
    UnrecognizedArgumentError,
)
from readbin.options import Options  # noqa: E402

__all__ = [
    "ConfigFileError",
    "FileNotFoundError",
    "InvalidValueError",
    "MissingRequiredArgumentError",
    "NoOptionsProvidedError",
    "Options",
    "OptionsError",
    "ParseResult",
    "ReadbinError",
    "UnrecognizedArgumentError",
    "parse_options",
    "__version__",
]
