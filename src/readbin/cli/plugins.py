#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Plugin-aware pre-processing of the command line.

Plugins loaded with ``--load NAME`` may accept their own flags, spelled
``--NAME-<flag>``. The fixed option schema cannot know about them, so before
the strict parse two things happen:

1. a tolerant *peek* pass extracts the plugin names from ``--load``/``-l``
   while ignoring every other token, and
2. every token starting with ``--NAME-`` for a discovered plugin is removed,
   together with its value when that is given as a separate token.

Matching is done on the literal token text. A plugin switch that takes no
value must not be directly followed by the input file, which would be taken
as the switch's value; ``--NAME-switch`` is best given after ``FILE``.
"""

from __future__ import annotations

import argparse
import logging
from typing import Iterable, Sequence

from readbin.constants import PLUGIN_FLAG_TEMPLATE, PROGRAM_NAME
from readbin.options.schema import LOAD_SPEC, SCHEMA, Arity

logger = logging.getLogger(__name__)


class _PeekArgumentParser(argparse.ArgumentParser):
    """Parser for the peek pass; reports problems by raising instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise argparse.ArgumentError(None, message)


def _build_peek_parser() -> argparse.ArgumentParser:
    parser = _PeekArgumentParser(
        prog=PROGRAM_NAME,
        add_help=False,
        allow_abbrev=False,
        exit_on_error=False,
    )
    parser.add_argument(*LOAD_SPEC.flags, dest=LOAD_SPEC.dest, action="append", default=[], metavar=LOAD_SPEC.metavar)
    # switches split clusters like -vlfoo the same way the full parser does
    for spec in SCHEMA:
        if spec.arity is Arity.FLAG:
            parser.add_argument(*spec.flags, dest=f"_{spec.dest}", action="store_true", help=argparse.SUPPRESS)
    return parser


def peek_plugin_names(argv: Sequence[str]) -> list[str]:
    """Extract the plugin names given with ``--load``/``-l``.

    Boolean switches are understood so that ``-l`` is found inside a cluster
    such as ``-vlfoo``; every other token is ignored. Empty names are
    dropped. The pass never fails: when no plugin name can be found,
    including when ``--load`` itself is malformed, a warning is logged and an
    empty list is returned.

    Parameters
    ----------
    argv : Sequence[str]
        Command line tokens, without the program name

    Returns
    -------
    list of str
        Plugin names in command line order

    Examples
    --------
    >>> peek_plugin_names(["/bin/ls", "-l", "foo", "--load=bar", "--foo-depth=3"])
    ['foo', 'bar']

    """
    parser = _build_peek_parser()
    try:
        namespace, _ = parser.parse_known_args(list(argv))
    except argparse.ArgumentError as exc:
        logger.warning("no plugins: could not read %s options: %s", LOAD_SPEC.display_name, exc)
        return []

    # `--load=` names no plugin
    plugins = [name for name in getattr(namespace, LOAD_SPEC.dest, None) or [] if name]
    if not plugins:
        logger.warning("no plugins")
    else:
        logger.debug("plugins requested: %s", ", ".join(plugins))
    return plugins


def plugin_prefix(plugin: str) -> str:
    """Return the prefix of the flags owned by ``plugin``.

    Examples
    --------
    >>> plugin_prefix("callgraph")
    '--callgraph-'

    """
    return PLUGIN_FLAG_TEMPLATE.format(plugin=plugin)


def is_plugin_token(token: str, plugins: Iterable[str]) -> bool:
    """Return True if ``token`` is exactly or begins with ``--<plugin>-`` for one of ``plugins``."""
    return any(token.startswith(plugin_prefix(plugin)) for plugin in plugins)


def filter_plugin_args(argv: Sequence[str], plugins: Iterable[str]) -> list[str]:
    """Return a copy of ``argv`` without the flags owned by ``plugins``.

    A plugin flag written without ``=`` takes the following token with it
    when that token does not itself look like an option, so both
    ``--foo-depth=3`` and ``--foo-depth 3`` are removed whole. The relative
    order of the remaining tokens is kept and ``argv`` itself is not
    modified. Filtering an already filtered list with the same plugins
    changes nothing.

    Examples
    --------
    >>> filter_plugin_args(["/bin/ls", "-l", "foo", "--foo-flag", "x", "--foobar"], ["foo"])
    ['/bin/ls', '-l', 'foo', '--foobar']

    """
    plugins = [plugin for plugin in plugins if plugin]
    if not plugins:
        return list(argv)

    kept: list[str] = []
    pending_value = False
    for token in argv:
        if is_plugin_token(token, plugins):
            pending_value = "=" not in token
            continue
        if pending_value and not token.startswith("-"):
            pending_value = False
            continue
        pending_value = False
        kept.append(token)

    removed = len(argv) - len(kept)
    if removed:
        logger.debug("removed %d plugin option token(s) before parsing", removed)
    return kept
