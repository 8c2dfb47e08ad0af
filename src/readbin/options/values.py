#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Closed value types used by option fields.

Enumerated flag values are ``str`` enums so that they print and compare as
the tags users type. Options whose value may be one of several shapes are
small frozen dataclass unions with a fixed set of variants.

Presence-without-argument ("vopt") options are modelled with three states:

- ``None`` when the flag is absent,
- ``Implicit(value)`` when the flag is given bare and takes its fixed default,
- ``Explicit(value)`` when the flag is given with a value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


class LabelFormat(str, Enum):
    """Content put on graph labels."""

    WITH_NAME = "with-name"
    WITH_ASM = "with-asm"
    WITH_BIL = "with-bil"

    def __str__(self) -> str:
        return self.value


class DumpFormat(str, Enum):
    """Formats of the program dump printed to standard output."""

    ASM = "asm"
    BIL = "bil"

    def __str__(self) -> str:
        return self.value


class SymbolFormat(str, Enum):
    """Columns printed for each found symbol."""

    NAME = "name"
    ADDR = "addr"
    SIZE = "size"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DemangleInternal:
    """Demangle C++ symbols with the built-in algorithm."""

    def __str__(self) -> str:
        return "internal"


@dataclass(frozen=True)
class DemangleProgram:
    """Demangle C++ symbols by piping them through an external tool, e.g. ``c++filt``."""

    name: str

    def __str__(self) -> str:
        return self.name


Demangler = Union[DemangleInternal, DemangleProgram]


def parse_demangler(value: str) -> Demangler:
    """Parse a ``--demangle`` value: ``internal`` or the name of a program."""
    if value == "internal":
        return DemangleInternal()
    return DemangleProgram(value)


@dataclass(frozen=True)
class IdaSearchDefault:
    """Locate the IDA executable in its default places."""

    def __str__(self) -> str:
        return "<search default>"


@dataclass(frozen=True)
class IdaExecutable:
    """Use the given IDA executable (a path or a name on ``PATH``)."""

    path: str

    def __str__(self) -> str:
        return self.path


IdaLocation = Union[IdaSearchDefault, IdaExecutable]


def parse_ida_location(value: str) -> IdaLocation:
    """Parse an explicit ``--use-ida`` value."""
    return IdaExecutable(value)


@dataclass(frozen=True)
class Implicit(Generic[T]):
    """A vopt flag given bare; ``value`` is the flag's fixed default."""

    value: T


@dataclass(frozen=True)
class Explicit(Generic[T]):
    """A vopt flag given with a value."""

    value: T


Vopt = Optional[Union[Implicit[T], Explicit[T]]]


def vopt_value(field: Vopt[T]) -> Optional[T]:
    """Return the value carried by a vopt field, or None when it is absent.

    Examples
    --------
    >>> vopt_value(None) is None
    True
    >>> vopt_value(Implicit("asm"))
    'asm'
    >>> vopt_value(Explicit("bil"))
    'bil'

    """
    if field is None:
        return None
    return field.value
