#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Declarative table of every flag accepted by ``bap``.

Each ``OptionSpec`` fixes one flag's names, arity, value domain, default,
bare-flag default and validation. The CLI builder turns this table into an
``argparse`` parser and the ``Options`` record has one field per entry, in
the same order. Nothing in this module touches the filesystem until a
validator is called on a parsed value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from readbin.constants import (
    DEFAULT_BYTEWEIGHT_LENGTH,
    DEFAULT_BYTEWEIGHT_THRESHOLD,
    DEFAULT_LOADER,
    DEFAULT_LOG_LEVEL,
    LOG_LEVELS,
    PLUGIN_PATH_ENV,
)
from readbin.exceptions import FileNotFoundError
from readbin.options.values import (
    DemangleInternal,
    DumpFormat,
    IdaSearchDefault,
    LabelFormat,
    SymbolFormat,
    parse_demangler,
    parse_ida_location,
)

# Marks a flag that is never valid bare
NO_IMPLICIT = object()

# Bare-flag default resolved by the parser to its working directory
CURRENT_DIRECTORY = object()


class Arity(str, Enum):
    """How often a flag may appear and what it consumes."""

    POSITIONAL = "positional"
    FLAG = "flag"
    SINGLE = "single-value"
    REPEATABLE = "repeatable-value"
    REPEATABLE_SELECT = "repeatable-enum-select"


class Domain(str, Enum):
    """Value domain of a flag's argument."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ENUM = "enum-tag"
    OPTIONAL_STRING = "optional-string"
    OPTIONAL_OF_OPTIONAL_STRING = "optional-of-optional-string"
    FILE = "file"


_DOMAIN_CONVERTERS: dict[Domain, Callable[[str], Any]] = {
    Domain.STRING: str,
    Domain.OPTIONAL_STRING: str,
    Domain.INT: int,
    Domain.FLOAT: float,
    Domain.FILE: Path,
}


def existing_file(value: Path, option: str) -> None:
    """Check that ``value`` names an existing file that is not a directory.

    Raises
    ------
    FileNotFoundError
        If the path does not exist or is a directory.

    """
    path = Path(value)
    if not path.exists():
        raise FileNotFoundError(str(value), option=option)
    if path.is_dir():
        raise FileNotFoundError(str(value), option=option, message=f"{value} is a directory, not a file")


def doc_alts(values: Iterable[Any]) -> str:
    """Render alternatives for help text.

    Examples
    --------
    >>> doc_alts(["asm", "bil"])
    "either `asm' or `bil'"
    >>> doc_alts(["name", "addr", "size"])
    "one of `name', `addr' or `size'"

    """
    quoted = [f"`{value}'" for value in values]
    if len(quoted) == 1:
        return quoted[0]
    head = ", ".join(quoted[:-1])
    prefix = "either" if len(quoted) == 2 else "one of"
    return f"{prefix} {head} or {quoted[-1]}"


@dataclass(frozen=True)
class OptionSpec:
    """Definition of a single command line option.

    Parameters
    ----------
    dest : str
        Name of the ``Options`` field the option fills
    flags : tuple of str
        Long names and short alias; empty for the positional argument
    arity : Arity
        Shape of the option on the command line
    domain : Domain
        Value domain of its argument
    help : str
        Help text shown by ``--help``
    default : Any, default None
        Value used when the option is omitted
    implicit : Any, default NO_IMPLICIT
        Value used when the option is given bare
    converter : callable, optional
        Turns a raw string into the domain value. Derived from ``domain``
        for plain strings, numbers and files.
    validator : callable, optional
        Called as ``validator(value, option)`` on every converted value
    choices : tuple, default ()
        Members of an enumerated domain
    selections : tuple, default ()
        ``(flag, value, help)`` triples of a multi-select option
    metavar : str, optional
        Name of the value in usage messages

    """

    dest: str
    flags: tuple[str, ...]
    arity: Arity
    domain: Domain
    help: str
    default: Any = None
    implicit: Any = NO_IMPLICIT
    converter: Optional[Callable[[str], Any]] = None
    validator: Optional[Callable[[Any, str], None]] = None
    choices: tuple[Any, ...] = ()
    selections: tuple[tuple[str, Any, str], ...] = ()
    metavar: Optional[str] = None

    @property
    def is_vopt(self) -> bool:
        """Return True if the option is also valid without an argument."""
        return self.implicit is not NO_IMPLICIT

    @property
    def is_repeatable(self) -> bool:
        """Return True if every occurrence accumulates into a sequence."""
        return self.arity in (Arity.REPEATABLE, Arity.REPEATABLE_SELECT)

    @property
    def display_name(self) -> str:
        """Return the name used for the option in diagnostics."""
        if self.flags:
            return self.flags[0]
        return self.metavar or self.dest.upper()

    @property
    def long_flags(self) -> tuple[str, ...]:
        """Return the ``--`` spellings of the option."""
        return tuple(flag for flag in self.flags if flag.startswith("--"))

    @property
    def value_type(self) -> Callable[[str], Any]:
        """Return the callable turning a raw string into the domain value."""
        return self.converter or _DOMAIN_CONVERTERS.get(self.domain, str)

    def convert(self, raw: str) -> Any:
        """Convert a raw string into the option's domain.

        Raises
        ------
        ValueError
            If ``raw`` is not a member of the domain.

        """
        return self.value_type(raw)

    def validate(self, value: Any) -> None:
        """Run the option's validator on a resolved value, if it has one."""
        if self.validator is None or value is None:
            return
        if self.is_repeatable:
            for item in value:
                self.validator(item, self.display_name)
        else:
            self.validator(value, self.display_name)

    def empty_value(self) -> Any:
        """Return the field value used when the option never appeared."""
        if self.is_repeatable:
            return tuple(self.default or ())
        return self.default


def _enum_metavar(enum_values: Sequence[Enum]) -> str:
    return "{" + ",".join(member.value for member in enum_values) + "}"


_DUMP_CHOICES = tuple(DumpFormat)
_SYMBOL_CHOICES = tuple(SymbolFormat)

SCHEMA: tuple[OptionSpec, ...] = (
    OptionSpec(
        dest="filename",
        flags=(),
        arity=Arity.POSITIONAL,
        domain=Domain.FILE,
        help="Input filename.",
        validator=existing_file,
        metavar="FILE",
    ),
    OptionSpec(
        dest="symsfile",
        flags=("--syms", "-s"),
        arity=Arity.SINGLE,
        domain=Domain.FILE,
        help="Use this file as symbols source",
        validator=existing_file,
        metavar="SYMS",
    ),
    OptionSpec(
        dest="loader",
        flags=("--loader",),
        arity=Arity.SINGLE,
        domain=Domain.STRING,
        help="Backend name for an image loader",
        default=DEFAULT_LOADER,
        metavar="LOADER",
    ),
    OptionSpec(
        dest="labels",
        flags=("--labels-with-name", "--labels-with-asm", "--labels-with-bil"),
        arity=Arity.REPEATABLE_SELECT,
        domain=Domain.ENUM,
        help="Content of graph labels",
        default=(LabelFormat.WITH_NAME,),
        choices=tuple(LabelFormat),
        selections=(
            ("--labels-with-name", LabelFormat.WITH_NAME, "Put block name on graph labels"),
            ("--labels-with-asm", LabelFormat.WITH_ASM, "Put assembler instructions on graph labels"),
            ("--labels-with-bil", LabelFormat.WITH_BIL, "Put bil instructions on graph labels"),
        ),
    ),
    OptionSpec(
        dest="phoenix",
        flags=("--phoenix",),
        arity=Arity.SINGLE,
        domain=Domain.OPTIONAL_STRING,
        help="Output data in a phoenix format. Output folder can be optionally "
        "specified as --phoenix=DIR. If omitted, the current working directory is used.",
        implicit=CURRENT_DIRECTORY,
        metavar="DIR",
    ),
    OptionSpec(
        dest="dump",
        flags=("--dump", "-d"),
        arity=Arity.REPEATABLE,
        domain=Domain.ENUM,
        help="Print dump to standard output. Optional value defines output format, "
        f"and can be {doc_alts(member.value for member in _DUMP_CHOICES)}. "
        "You can specify this parameter several times, if you want both, for example.",
        implicit=DumpFormat.ASM,
        converter=DumpFormat,
        choices=_DUMP_CHOICES,
        metavar=_enum_metavar(_DUMP_CHOICES),
    ),
    OptionSpec(
        dest="demangle",
        flags=("--demangle",),
        arity=Arity.SINGLE,
        domain=Domain.OPTIONAL_STRING,
        help="Demangle C++ symbols, using either internal algorithm or a specified external tool, "
        "e.g. --demangle=c++filt.",
        implicit=DemangleInternal(),
        converter=parse_demangler,
        metavar="TOOL",
    ),
    OptionSpec(
        dest="no_resolve",
        flags=("--no-resolve", "-n"),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Do not resolve addresses to symbolic names",
        default=False,
    ),
    OptionSpec(
        dest="keep_alive",
        flags=("--keep-alive",),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Keep alive unused temporary variables",
        default=False,
    ),
    OptionSpec(
        dest="no_inline",
        flags=("--no-inline",),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Disable inlining temporary variables",
        default=False,
    ),
    OptionSpec(
        dest="keep_consts",
        flags=("--keep-const",),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Disable constant folding",
        default=False,
    ),
    OptionSpec(
        dest="no_optimizations",
        flags=("--no-optimizations",),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Disable all kinds of optimizations",
        default=False,
    ),
    OptionSpec(
        dest="binary",
        flags=("--binary",),
        arity=Arity.SINGLE,
        domain=Domain.OPTIONAL_STRING,
        help="Parse input file as raw binary with specified architecture, e.g. x86, arm, etc.",
        metavar="ARCH",
    ),
    OptionSpec(
        dest="verbose",
        flags=("--verbose", "-v"),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Print verbose output",
        default=False,
    ),
    OptionSpec(
        dest="no_byteweight",
        flags=("--no-byteweight",),
        arity=Arity.FLAG,
        domain=Domain.BOOL,
        help="Disable root finding with byteweight",
        default=False,
    ),
    OptionSpec(
        dest="bw_length",
        flags=("--byteweight-length",),
        arity=Arity.SINGLE,
        domain=Domain.INT,
        help="Maximum prefix length when byteweighting",
        default=DEFAULT_BYTEWEIGHT_LENGTH,
        metavar="INT",
    ),
    OptionSpec(
        dest="bw_threshold",
        flags=("--byteweight-threshold",),
        arity=Arity.SINGLE,
        domain=Domain.FLOAT,
        help="Minimum score for the function start",
        default=DEFAULT_BYTEWEIGHT_THRESHOLD,
        metavar="FLOAT",
    ),
    OptionSpec(
        dest="print_symbols",
        flags=("--print-symbols", "-p"),
        arity=Arity.REPEATABLE,
        domain=Domain.ENUM,
        help="Print found symbols. Optional value defines output format, "
        f"and can be {doc_alts(member.value for member in _SYMBOL_CHOICES)}. "
        "You can specify this parameter several times, if you want both, for example.",
        implicit=SymbolFormat.NAME,
        converter=SymbolFormat,
        choices=_SYMBOL_CHOICES,
        metavar=_enum_metavar(_SYMBOL_CHOICES),
    ),
    OptionSpec(
        dest="use_ida",
        flags=("--use-ida",),
        arity=Arity.SINGLE,
        domain=Domain.OPTIONAL_OF_OPTIONAL_STRING,
        help="Use IDA to extract symbols from file. You can optionally provide path to IDA "
        "executable, or executable name, as --use-ida=PATH.",
        implicit=IdaSearchDefault(),
        converter=parse_ida_location,
        metavar="PATH",
    ),
    OptionSpec(
        dest="sigsfile",
        flags=("--sigs",),
        arity=Arity.SINGLE,
        domain=Domain.FILE,
        help="Path to the signature file. No needed by default, usually it is enough "
        "to run `bap-byteweight update'.",
        validator=existing_file,
        metavar="SIGS",
    ),
    OptionSpec(
        dest="load",
        flags=("--load", "-l"),
        arity=Arity.REPEATABLE,
        domain=Domain.STRING,
        help="Load the specified plugin. This option can be specified several times. "
        "Every plugin will be loaded and executed in the same order, as they were "
        "specified on command line.",
        default=(),
        metavar="NAME",
    ),
    OptionSpec(
        dest="emit_ida_script",
        flags=("--emit-ida-script",),
        arity=Arity.SINGLE,
        domain=Domain.OPTIONAL_STRING,
        help="Emit annotations to IDA based on project annotations to the specified filename.",
        metavar="FILE",
    ),
    OptionSpec(
        dest="load_path",
        flags=("--load-path", "-L"),
        arity=Arity.REPEATABLE,
        domain=Domain.STRING,
        help="Add PATH to a set of search paths. Plugins specified with `-l' flag will be "
        "searched in this paths, if they are not found in the current folder or in a "
        f"folder specified by a `{PLUGIN_PATH_ENV}' environment variable",
        default=(),
        metavar="PATH",
    ),
    OptionSpec(
        dest="config",
        flags=("--config",),
        arity=Arity.SINGLE,
        domain=Domain.FILE,
        help="Read option defaults from a JSON, TOML or YAML file. Command line flags "
        "take precedence over the file.",
        validator=existing_file,
        metavar="CONFIG",
    ),
    OptionSpec(
        dest="log_level",
        flags=("--log-level",),
        arity=Arity.SINGLE,
        domain=Domain.ENUM,
        help="Logging level for diagnostics",
        default=DEFAULT_LOG_LEVEL,
        converter=str.upper,
        choices=LOG_LEVELS,
        metavar="{" + ",".join(LOG_LEVELS) + "}",
    ),
)

SCHEMA_BY_DEST: Mapping[str, OptionSpec] = {spec.dest: spec for spec in SCHEMA}

# The only entry the plugin peek pass depends on
LOAD_SPEC: OptionSpec = SCHEMA_BY_DEST["load"]


def vopt_specs(schema: Iterable[OptionSpec] = SCHEMA) -> tuple[OptionSpec, ...]:
    """Return the entries that are also valid without an argument."""
    return tuple(spec for spec in schema if spec.is_vopt)
