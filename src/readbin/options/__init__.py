#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Option schema and the resolved ``Options`` record.

``schema`` holds the declarative flag table, ``values`` the closed value
types used by individual fields and ``model`` the frozen ``Options``
dataclass built from a successful parse.
"""

from __future__ import annotations

from readbin.options.model import Options
from readbin.options.schema import (
    CURRENT_DIRECTORY,
    LOAD_SPEC,
    NO_IMPLICIT,
    SCHEMA,
    SCHEMA_BY_DEST,
    Arity,
    Domain,
    OptionSpec,
    existing_file,
)
from readbin.options.values import (
    DemangleInternal,
    DemangleProgram,
    Demangler,
    DumpFormat,
    Explicit,
    IdaExecutable,
    IdaLocation,
    IdaSearchDefault,
    Implicit,
    LabelFormat,
    SymbolFormat,
    Vopt,
    parse_demangler,
    vopt_value,
)

__all__ = [
    "Arity",
    "CURRENT_DIRECTORY",
    "DemangleInternal",
    "DemangleProgram",
    "Demangler",
    "Domain",
    "DumpFormat",
    "Explicit",
    "IdaExecutable",
    "IdaLocation",
    "IdaSearchDefault",
    "Implicit",
    "LOAD_SPEC",
    "LabelFormat",
    "NO_IMPLICIT",
    "OptionSpec",
    "Options",
    "SCHEMA",
    "SCHEMA_BY_DEST",
    "SymbolFormat",
    "Vopt",
    "existing_file",
    "parse_demangler",
    "vopt_value",
]
