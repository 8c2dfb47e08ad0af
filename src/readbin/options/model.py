#  Copyright (c) 2025 Tom Villani, Ph.D.
"""The ``Options`` record handed to the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from readbin.constants import (
    DEFAULT_BYTEWEIGHT_LENGTH,
    DEFAULT_BYTEWEIGHT_THRESHOLD,
    DEFAULT_LOADER,
    DEFAULT_LOG_LEVEL,
)
from readbin.options.values import (
    Demangler,
    DumpFormat,
    IdaLocation,
    LabelFormat,
    SymbolFormat,
    Vopt,
)


@dataclass(frozen=True)
class Options:
    """Fully resolved command line of one ``bap`` invocation.

    Instances are produced by ``parse_options`` once every field has been
    converted and validated; there is no partially populated state. Fields
    follow the order of ``readbin.options.schema.SCHEMA``.

    Parameters
    ----------
    filename : Path
        Input binary. Always an existing file that is not a directory.
    symsfile : Path or None
        File used as symbols source (``--syms``)
    loader : str
        Image loader backend (``--loader``)
    labels : tuple of LabelFormat
        Content of graph labels, in command line order
    phoenix : Vopt[str]
        Phoenix output folder; ``Implicit`` holds the working directory
    dump : tuple of DumpFormat
        Dump formats, in command line order
    demangle : Vopt[Demangler]
        Demangling mode; ``Implicit`` holds ``DemangleInternal()``
    no_resolve, keep_alive, no_inline, keep_consts, no_optimizations : bool
        Lifting and optimization switches
    binary : str or None
        Architecture for raw binary input
    verbose : bool
        Verbose output
    no_byteweight : bool
        Disable byteweight root finding
    bw_length : int
        Byteweight maximum prefix length
    bw_threshold : float
        Byteweight minimum score
    print_symbols : tuple of SymbolFormat
        Symbol columns, in command line order
    use_ida : Vopt[IdaLocation]
        IDA integration; ``Implicit`` holds ``IdaSearchDefault()``
    sigsfile : Path or None
        Byteweight signature file
    load : tuple of str
        Plugins to load, in command line order
    emit_ida_script : str or None
        Destination of the emitted IDA script
    load_path : tuple of str
        Extra plugin search paths, in command line order
    config : Path or None
        Configuration file the defaults were read from
    log_level : str
        Logging level name

    """

    filename: Path
    symsfile: Optional[Path] = None
    loader: str = DEFAULT_LOADER
    labels: tuple[LabelFormat, ...] = (LabelFormat.WITH_NAME,)
    phoenix: Vopt[str] = None
    dump: tuple[DumpFormat, ...] = ()
    demangle: Vopt[Demangler] = None
    no_resolve: bool = False
    keep_alive: bool = False
    no_inline: bool = False
    keep_consts: bool = False
    no_optimizations: bool = False
    binary: Optional[str] = None
    verbose: bool = False
    no_byteweight: bool = False
    bw_length: int = DEFAULT_BYTEWEIGHT_LENGTH
    bw_threshold: float = DEFAULT_BYTEWEIGHT_THRESHOLD
    print_symbols: tuple[SymbolFormat, ...] = ()
    use_ida: Vopt[IdaLocation] = None
    sigsfile: Optional[Path] = None
    load: tuple[str, ...] = ()
    emit_ida_script: Optional[str] = None
    load_path: tuple[str, ...] = ()
    config: Optional[Path] = None
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """Return the field names in declaration order."""
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow ``{field: value}`` mapping in declaration order."""
        return {name: getattr(self, name) for name in self.field_names()}

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Options":
        """Assemble an instance from a complete mapping of field values.

        Raises
        ------
        KeyError
            If any field is missing from ``values``.

        """
        return cls(**{name: values[name] for name in cls.field_names()})
