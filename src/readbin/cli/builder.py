#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Schema-driven argument parser for the ``bap`` command line.

``ReadbinCLIBuilder`` turns the declarative table in
``readbin.options.schema`` into an ``argparse`` parser and turns a parsed
namespace back into a validated ``Options``. ``parse_options`` wraps the
whole pipeline::

    argv -> peek --load -> drop plugin flags -> strict parse -> Options

and reports the outcome as a ``ParseResult`` instead of raising.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from readbin.cli.config import config_overrides, load_config_file
from readbin.cli.custom_actions import (
    DynamicVersionAction,
    TrackingAppendAction,
    TrackingAppendConstAction,
    TrackingExplicitAction,
    TrackingImplicitAction,
    TrackingStoreAction,
    TrackingStoreTrueAction,
    provided_args,
)
from readbin.cli.plugins import filter_plugin_args, peek_plugin_names
from readbin.constants import BARE_FLAG_SUFFIX, DISTRIBUTION_NAME, PROGRAM_NAME
from readbin.exceptions import (
    FileNotFoundError,
    InvalidValueError,
    MissingRequiredArgumentError,
    NoOptionsProvidedError,
    OptionsError,
    UnrecognizedArgumentError,
)
from readbin.options.model import Options
from readbin.options.schema import CURRENT_DIRECTORY, NO_IMPLICIT, SCHEMA, Arity, OptionSpec, vopt_specs

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4

DESCRIPTION = "Binary Analysis Platform"

EPILOG = f"""
{PROGRAM_NAME} is a tool for binary analysis. It is an entry point to a
binary analysis platform, that allows you to start your analysis right now.

The default {PROGRAM_NAME} performs the following operations on provided file:
  - disassemble
  - lift instructions into BIL
  - reconstruct CFG
  - reconstruct functions

Results can be printed in different formats, including plain text, html and dot.

{PROGRAM_NAME} is also organized with a plugin architecture. Plugins are loaded
with -l NAME and executed in the order they were given. A loaded plugin may
accept its own options, spelled --NAME-<option>; those are passed through to
the plugin untouched:

  $ {PROGRAM_NAME} /bin/ls -lmycode --mycode-depth=3

{PROGRAM_NAME} also can integrate with IDA. It can sync names with IDA, and emit
idapython scripts, based on the analysis.

Values of --phoenix, --dump, --demangle, --print-symbols and --use-ida are
optional: --dump bil, --dump=bil and -dbil give a value, while --dump given
last or followed by another option means --dump=asm.
"""


def get_version() -> str:
    """Get the version of the readbin package."""
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "unknown"


class OptionsArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors by raising ``ArgumentError``.

    Combined with ``exit_on_error=False`` this keeps every malformed command
    line inside the parser's control flow; only ``--help`` and ``--version``
    still exit.
    """

    def error(self, message: str) -> None:  # type: ignore[override]
        raise argparse.ArgumentError(None, message)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``parse_options``: either ``options`` or ``error`` is set.

    Attributes
    ----------
    options : Options or None
        The resolved options on success
    error : OptionsError or None
        The failure on error
    plugins : tuple of str
        Plugin names found by the peek pass

    """

    options: Optional[Options] = None
    error: Optional[OptionsError] = None
    plugins: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """Return True when parsing succeeded."""
        return self.options is not None

    @property
    def diagnostic(self) -> str:
        """Return the human-readable failure message, empty on success."""
        return self.error.message if self.error is not None else ""

    def unwrap(self) -> Options:
        """Return the options, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        if self.options is None:
            raise NoOptionsProvidedError()
        return self.options


class ReadbinCLIBuilder:
    """Builds the ``bap`` argument parser from the option schema.

    Parameters
    ----------
    schema : sequence of OptionSpec, optional
        Option table, ``SCHEMA`` by default
    env : Mapping[str, str], optional
        Environment consulted for ``BAP_<DEST>`` default overrides. Nothing
        is read from ``os.environ`` unless it is passed here.
    cwd : Path, optional
        Directory used as the bare ``--phoenix`` value; resolved with
        ``Path.cwd()`` when omitted

    """

    def __init__(
        self,
        schema: Sequence[OptionSpec] = SCHEMA,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        """Initialize the CLI builder."""
        self.schema = tuple(schema)
        self.schema_by_dest: Dict[str, OptionSpec] = {spec.dest: spec for spec in self.schema}
        self.env = env
        self.cwd = cwd

    @staticmethod
    def bare_flag(flag: str) -> str:
        """Return the hidden option string standing for ``flag`` given bare.

        Examples
        --------
        >>> ReadbinCLIBuilder.bare_flag("--dump")
        '--dump:bare'

        """
        return f"{flag}{BARE_FLAG_SUFFIX}"

    def resolve_implicit(self, spec: OptionSpec) -> Any:
        """Return the bare-flag default of ``spec``, or None if it has none."""
        if spec.implicit is NO_IMPLICIT:
            return None
        if spec.implicit is CURRENT_DIRECTORY:
            return str(self.cwd if self.cwd is not None else Path.cwd())
        return spec.implicit

    def _add_positional(self, parser: argparse.ArgumentParser, spec: OptionSpec) -> None:
        # optional at argparse level so that absence becomes MissingRequiredArgumentError
        parser.add_argument(
            spec.dest, nargs="?", default=None, type=spec.value_type, metavar=spec.metavar, help=spec.help
        )

    def _add_select(self, parser: argparse.ArgumentParser, spec: OptionSpec) -> None:
        for flag, value, help_text in spec.selections:
            parser.add_argument(flag, dest=spec.dest, action=TrackingAppendConstAction, const=value, help=help_text)

    def _add_vopt(self, parser: argparse.ArgumentParser, spec: OptionSpec) -> None:
        implicit = self.resolve_implicit(spec)
        if spec.is_repeatable:
            parser.add_argument(
                *spec.flags,
                dest=spec.dest,
                action=TrackingAppendAction,
                type=spec.value_type,
                metavar=spec.metavar,
                help=spec.help,
            )
            bare_action: type[argparse.Action] = TrackingAppendConstAction
        else:
            parser.add_argument(
                *spec.flags,
                dest=spec.dest,
                action=TrackingExplicitAction,
                type=spec.value_type,
                default=spec.default,
                metavar=spec.metavar,
                help=spec.help,
            )
            bare_action = TrackingImplicitAction
        parser.add_argument(
            *(self.bare_flag(flag) for flag in spec.flags),
            dest=spec.dest,
            action=bare_action,
            const=implicit,
            help=argparse.SUPPRESS,
        )

    def add_spec_arguments(self, parser: argparse.ArgumentParser, spec: OptionSpec) -> None:
        """Add the argparse argument(s) describing one schema entry.

        Parameters
        ----------
        parser : argparse.ArgumentParser
            Parser to extend
        spec : OptionSpec
            Schema entry to register

        """
        if spec.arity is Arity.POSITIONAL:
            self._add_positional(parser, spec)
        elif spec.arity is Arity.REPEATABLE_SELECT:
            self._add_select(parser, spec)
        elif spec.is_vopt:
            self._add_vopt(parser, spec)
        elif spec.arity is Arity.FLAG:
            parser.add_argument(
                *spec.flags, dest=spec.dest, action=TrackingStoreTrueAction, default=spec.default, help=spec.help, env=self.env
            )
        elif spec.arity is Arity.REPEATABLE:
            parser.add_argument(
                *spec.flags,
                dest=spec.dest,
                action=TrackingAppendAction,
                type=spec.value_type,
                metavar=spec.metavar,
                help=spec.help,
            )
        else:
            parser.add_argument(
                *spec.flags,
                dest=spec.dest,
                action=TrackingStoreAction,
                type=spec.value_type,
                default=spec.default,
                choices=spec.choices or None,
                metavar=spec.metavar,
                help=spec.help,
                env=self.env,
            )

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the complete argument parser for the schema.

        Returns
        -------
        ArgumentParser
            Configured parser; it raises ``argparse.ArgumentError`` on
            malformed input instead of exiting

        """
        parser = OptionsArgumentParser(
            prog=PROGRAM_NAME,
            description=DESCRIPTION,
            epilog=EPILOG,
            formatter_class=argparse.RawDescriptionHelpFormatter,
            allow_abbrev=False,
            exit_on_error=False,
        )
        parser.add_argument(
            "--version", action=DynamicVersionAction, version_callback=lambda: f"{PROGRAM_NAME} {get_version()}"
        )

        for spec in self.schema:
            self.add_spec_arguments(parser, spec)

        return parser

    def normalize_argv(self, argv: Sequence[str]) -> list[str]:
        """Rewrite bare vopt flags to their hidden companions.

        A vopt flag takes the following token as its value unless that token
        looks like an option (or ``--``) or there is none. Without a value,
        ``--dump`` becomes ``--dump:bare`` so argparse stores the bare-flag
        default instead of failing. ``--dump=bil`` and ``-dbil`` are left
        alone. Tokens after ``--`` are positional and never rewritten.

        Examples
        --------
        >>> ReadbinCLIBuilder(env={}).normalize_argv(["--dump", "--dump", "bil", "-p"])
        ['--dump:bare', '--dump', 'bil', '-p:bare']

        """
        bare = {flag for spec in vopt_specs(self.schema) for flag in spec.flags}
        normalized: list[str] = []
        for index, token in enumerate(argv):
            if token == "--":
                normalized.extend(argv[index:])
                break
            following = argv[index + 1] if index + 1 < len(argv) else None
            if token in bare and (following is None or following.startswith("-")):
                token = self.bare_flag(token)
            normalized.append(token)
        return normalized

    @staticmethod
    def _translate_argument_error(exc: argparse.ArgumentError) -> OptionsError:
        return InvalidValueError(str(exc), option=exc.argument_name, original_error=exc)

    def _apply_config(self, namespace: argparse.Namespace) -> None:
        config_spec = self.schema_by_dest.get("config")
        config_path = getattr(namespace, "config", None)
        if config_spec is None or config_path is None:
            return

        config_spec.validate(config_path)
        overrides = config_overrides(
            load_config_file(config_path),
            self.schema_by_dest,
            self.resolve_implicit,
            config_path=str(config_path),
        )
        explicit = provided_args(namespace)
        for dest, value in overrides.items():
            if dest in explicit:
                logger.debug("%s given on the command line; ignoring config value", dest)
                continue
            setattr(namespace, dest, value)

    def _resolve_field(self, spec: OptionSpec, value: Any) -> Any:
        if spec.arity is Arity.FLAG:
            return bool(value)
        if spec.is_repeatable:
            return tuple(value) if value else spec.empty_value()
        return value

    def assemble(self, namespace: argparse.Namespace) -> Options:
        """Validate a parsed namespace and build ``Options`` from it.

        Raises
        ------
        MissingRequiredArgumentError
            If the positional input file is absent
        FileNotFoundError
            If a file option names a missing path or a directory
        ConfigFileError
            If ``--config`` names an unusable file

        """
        for spec in self.schema:
            if spec.arity is Arity.POSITIONAL and getattr(namespace, spec.dest, None) is None:
                raise MissingRequiredArgumentError(spec.display_name)

        self._apply_config(namespace)

        values: Dict[str, Any] = {}
        for spec in self.schema:
            value = self._resolve_field(spec, getattr(namespace, spec.dest, None))
            spec.validate(value)
            values[spec.dest] = value

        return Options.from_mapping(values)

    def parse(self, argv: Sequence[str]) -> Options:
        """Parse already filtered tokens into ``Options``.

        Raises
        ------
        OptionsError
            On any malformed command line

        """
        parser = self.build_parser()
        try:
            namespace, extras = parser.parse_known_args(self.normalize_argv(argv))
        except argparse.ArgumentError as exc:
            raise self._translate_argument_error(exc) from exc

        if namespace is None:
            raise NoOptionsProvidedError()
        if extras:
            raise UnrecognizedArgumentError(extras)

        return self.assemble(namespace)


def create_parser(env: Optional[Mapping[str, str]] = None, cwd: Optional[Path] = None) -> argparse.ArgumentParser:
    """Create the ``bap`` argument parser, e.g. for help output."""
    return ReadbinCLIBuilder(env=env, cwd=cwd).build_parser()


def parse_options(
    argv: Sequence[str],
    *,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> ParseResult:
    """Turn command line tokens into ``Options`` or a diagnostic.

    Plugin names are peeked from ``--load``/``-l`` first, the plugins' own
    ``--<name>-`` flags are removed, and the rest is parsed strictly against
    the schema. There is no partial success and no retry.

    Parameters
    ----------
    argv : Sequence[str]
        Command line tokens, without the program name
    env : Mapping[str, str], optional
        Environment used for ``BAP_<DEST>`` default overrides
    cwd : Path, optional
        Working directory used for the bare ``--phoenix`` value

    Returns
    -------
    ParseResult
        ``options`` on success, ``error`` otherwise

    Examples
    --------
    >>> result = parse_options(["/bin/ls", "--verbose"])
    >>> result.ok, result.options.verbose
    (True, True)

    """
    plugins = peek_plugin_names(argv)
    filtered = filter_plugin_args(argv, plugins)

    builder = ReadbinCLIBuilder(env=env, cwd=cwd)
    try:
        options = builder.parse(filtered)
    except OptionsError as exc:
        logger.debug("command line rejected: %s", exc.message)
        return ParseResult(error=exc, plugins=tuple(plugins))

    return ParseResult(options=options, plugins=tuple(plugins))


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to an appropriate CLI exit code.

    Parameters
    ----------
    exception : Exception
        The exception to map to an exit code

    Returns
    -------
    int
        The appropriate exit code for the exception type

    """
    if isinstance(exception, FileNotFoundError):
        return EXIT_FILE_ERROR

    # missing, invalid, unrecognized and config problems
    if isinstance(exception, OptionsError):
        return EXIT_VALIDATION_ERROR

    return EXIT_ERROR
