"""Command-line entry point for ``bap``.

The entry point only assembles a validated ``Options`` value from the command
line and hands it to an analysis runner. The analysis itself (disassembly,
lifting, CFG reconstruction, plugin execution) lives outside this package and
is attached through the ``runner`` argument of ``main``.

Environment Variable Support
----------------------------
Flags and single-value options take their default from ``BAP_<OPTION_NAME>``
when it is set, where the option name is the ``Options`` field name in upper
case. Command line arguments always override environment variables.

Examples
--------
Analyse a binary with the default settings::

    $ bap /bin/ls

Dump assembly and BIL, print symbol names and addresses::

    $ bap /bin/ls --dump --dump=bil -pname -paddr

Load a plugin and pass it one of its own options::

    $ bap /bin/ls -l callgraph --callgraph-depth=3

Read defaults from a configuration file::

    $ bap /bin/ls --config bap.toml

"""

import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from readbin.cli.builder import (
    EXIT_SUCCESS,
    ParseResult,
    ReadbinCLIBuilder,
    create_parser,
    get_exit_code_for_exception,
    parse_options,
)
from readbin.cli.output import describe_options
from readbin.cli.plugins import filter_plugin_args, peek_plugin_names
from readbin.constants import DEFAULT_LOG_LEVEL, PROGRAM_NAME
from readbin.exceptions import ReadbinError
from readbin.logging_utils import configure_logging
from readbin.options.model import Options

logger = logging.getLogger(__name__)

AnalysisRunner = Callable[[Options], int]

__all__ = [
    "AnalysisRunner",
    "ParseResult",
    "ReadbinCLIBuilder",
    "create_parser",
    "filter_plugin_args",
    "main",
    "parse_options",
    "peek_plugin_names",
]


def main(argv: Optional[Sequence[str]] = None, runner: Optional[AnalysisRunner] = None) -> int:
    """Parse the command line and run the analysis.

    Parameters
    ----------
    argv : Sequence[str], optional
        Command line tokens without the program name; ``sys.argv[1:]`` when
        omitted
    runner : callable, optional
        Receives the parsed ``Options`` and returns an exit code. Defaults to
        ``describe_options``, which prints the resolved configuration.

    Returns
    -------
    int
        Process exit code

    """
    # early diagnostics (e.g. from the plugin peek) need a handler
    configure_logging(DEFAULT_LOG_LEVEL)

    tokens = list(sys.argv[1:] if argv is None else argv)
    result = parse_options(tokens, env=os.environ, cwd=Path.cwd())

    if result.error is not None:
        logger.error("%s", result.diagnostic)
        logger.error("Try '%s --help' for more information.", PROGRAM_NAME)
        return get_exit_code_for_exception(result.error)

    options = result.unwrap()
    configure_logging(options.log_level, verbose=options.verbose)
    logger.debug("resolved options: %s", options)

    run = runner or describe_options
    try:
        exit_code = run(options)
    except ReadbinError as exc:
        logger.error("%s", exc.message)
        return get_exit_code_for_exception(exc)

    return EXIT_SUCCESS if exit_code is None else int(exit_code)
