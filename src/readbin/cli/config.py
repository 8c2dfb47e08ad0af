#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Configuration file loading for the ``bap`` command line.

A file passed with ``--config`` supplies defaults for any option that was not
given on the command line. JSON, TOML and YAML are accepted; a TOML file may
keep its settings under a ``[tool.bap]`` table, which makes ``pyproject.toml``
usable as a configuration file.

Keys are ``Options`` field names (``bw_length``, ``load_path``...); dashes are
accepted in place of underscores. Presence-without-argument options take
``true`` for their bare form and a string for an explicit value::

    # .bap.toml
    loader = "llvm"
    bw_length = 20
    dump = ["asm", "bil"]
    demangle = true
    load = ["callgraph"]
"""

import json
import logging
import sys
from enum import Enum
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Callable, Dict, Mapping

import yaml

from readbin.constants import CONFIG_SECTION, CONFIG_SUFFIXES
from readbin.exceptions import ConfigFileError
from readbin.options.schema import Arity, Domain, OptionSpec
from readbin.options.values import Explicit, Implicit

logger = logging.getLogger(__name__)

# Options that only make sense on the command line itself
_COMMAND_LINE_ONLY = frozenset({"filename", "config"})


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a JSON, TOML or YAML file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Top-level mapping of the file, or its ``[tool.bap]`` table for TOML
        files that have one

    Raises
    ------
    ConfigFileError
        If the file cannot be read, parsed, or has an unsupported format

    """
    config_path = Path(config_path)
    ext = config_path.suffix.lower()

    if ext not in CONFIG_SUFFIXES:
        raise ConfigFileError(
            f"Unsupported config file format: {ext or config_path.name}. Use .json, .toml, or .yaml",
            config_path=str(config_path),
        )

    try:
        if ext == ".toml":
            config = _load_toml_config(config_path)
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        else:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Invalid config file {config_path}: {e}", config_path=str(config_path), original_error=e) from e
    except OSError as e:
        raise ConfigFileError(
            f"Error reading config file {config_path}: {e}", config_path=str(config_path), original_error=e
        ) from e

    # an empty YAML document loads as None
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigFileError(
            f"Config file {config_path} must contain a mapping, got {type(config).__name__}",
            config_path=str(config_path),
        )

    logger.debug("Loaded %d setting(s) from %s", len(config), config_path)
    return config


def _load_toml_config(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    section: Any = data
    for name in CONFIG_SECTION:
        if not isinstance(section, dict) or name not in section:
            # no [tool.bap] table: the whole document is the configuration
            return data
        section = section[name]

    if not isinstance(section, dict):
        raise ConfigFileError(
            f"[{'.'.join(CONFIG_SECTION)}] section in {config_path} must be a table, got {type(section).__name__}",
            config_path=str(config_path),
        )
    return section


def _convert_scalar(spec: OptionSpec, raw: Any) -> Any:
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ValueError(f"expected a {spec.domain.value} value, got {type(raw).__name__}")
    if spec.domain is Domain.FLOAT:
        return float(raw)
    value = spec.convert(str(raw))
    if spec.choices and value not in spec.choices:
        raise ValueError(f"{raw!r} is not one of {', '.join(map(str, spec.choices))}")
    return value


def _convert_select(spec: OptionSpec, raw: Any) -> Any:
    by_tag = {(choice.value if isinstance(choice, Enum) else choice): choice for choice in spec.choices}
    if raw not in by_tag:
        raise ValueError(f"{raw!r} is not one of {', '.join(map(str, by_tag))}")
    return by_tag[raw]


def coerce_config_value(spec: OptionSpec, raw: Any, implicit: Any) -> Any:
    """Convert a configuration value into what the parser would have stored.

    Parameters
    ----------
    spec : OptionSpec
        Schema entry of the option being set
    raw : Any
        Value read from the configuration file
    implicit : Any
        Resolved bare-flag default of ``spec`` (ignored for non-vopt options)

    Returns
    -------
    Any
        ``bool`` for flags, a list for repeatable options, ``Implicit`` or
        ``Explicit`` for vopt options and the converted value otherwise

    Raises
    ------
    ValueError
        If ``raw`` does not fit the option's domain

    """
    if spec.arity is Arity.FLAG:
        if not isinstance(raw, bool):
            raise ValueError(f"expected true or false, got {raw!r}")
        return raw

    if spec.is_repeatable:
        items = raw if isinstance(raw, list) else [raw]
        if spec.arity is Arity.REPEATABLE_SELECT:
            return [_convert_select(spec, item) for item in items]
        # a bare `true` entry stands for the flag given without a value
        return [implicit if (spec.is_vopt and item is True) else _convert_scalar(spec, item) for item in items]

    if spec.is_vopt:
        if raw is True:
            return Implicit(implicit)
        if raw is False:
            return None
        return Explicit(_convert_scalar(spec, raw))

    return _convert_scalar(spec, raw)


def config_overrides(
    config: Mapping[str, Any],
    schema: Mapping[str, OptionSpec],
    implicit_of: Callable[[OptionSpec], Any],
    config_path: str | None = None,
) -> Dict[str, Any]:
    """Turn a loaded configuration mapping into ``{dest: value}`` overrides.

    Parameters
    ----------
    config : Mapping[str, Any]
        Mapping returned by ``load_config_file``
    schema : Mapping[str, OptionSpec]
        Schema entries by destination name
    implicit_of : callable
        Resolves the bare-flag default of a vopt entry
    config_path : str, optional
        File the mapping came from, for diagnostics

    Raises
    ------
    ConfigFileError
        For unknown keys, command-line-only keys and ill-typed values

    """
    overrides: Dict[str, Any] = {}
    for key, raw in config.items():
        dest = str(key).replace("-", "_")
        spec = schema.get(dest)
        if spec is None:
            raise ConfigFileError(f"Unknown option {key!r} in config file {config_path}", config_path=config_path, key=key)
        if dest in _COMMAND_LINE_ONLY:
            raise ConfigFileError(
                f"Option {key!r} can only be given on the command line", config_path=config_path, key=key
            )
        try:
            overrides[dest] = coerce_config_value(spec, raw, implicit_of(spec))
        except ValueError as e:
            raise ConfigFileError(
                f"Invalid value for {key!r} in config file {config_path}: {e}",
                config_path=config_path,
                key=key,
                original_error=e,
            ) from e
    return overrides
