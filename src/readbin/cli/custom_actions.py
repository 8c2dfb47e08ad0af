"""Custom argparse actions used by the ``bap`` option parser.

Every action records the destination it wrote in ``namespace._provided_args``
so later stages can tell a value given on the command line from a default,
for instance when a configuration file fills in the remaining options.

Store actions also accept an ``env`` mapping; ``BAP_<DEST>`` entries in it
replace the built-in default.
"""

from __future__ import annotations

#  Copyright (c) 2025 Tom Villani, Ph.D.
import argparse
import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from readbin.constants import ENV_PREFIX
from readbin.options.values import Explicit, Implicit

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("true", "1", "yes", "on")


def env_key(dest: str) -> str:
    """Return the environment variable that overrides ``dest``'s default.

    Examples
    --------
    >>> env_key("bw_length")
    'BAP_BW_LENGTH'

    """
    return f"{ENV_PREFIX}{dest.upper().replace('-', '_').replace('.', '_')}"


def mark_provided(namespace: argparse.Namespace, dest: str) -> None:
    """Record that ``dest`` was set from the command line."""
    if not hasattr(namespace, "_provided_args"):
        namespace._provided_args = set()
    namespace._provided_args.add(dest)


def provided_args(namespace: argparse.Namespace) -> set[str]:
    """Return the destinations set from the command line."""
    return set(getattr(namespace, "_provided_args", ()))


class TrackingStoreAction(argparse.Action):
    """Store action that tracks whether an argument was explicitly provided.

    A ``BAP_<DEST>`` entry in ``env`` replaces the default after being run
    through ``type``. Values that fail conversion are logged and ignored.
    """

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        nargs: Optional[Union[int, str]] = None,
        const: Optional[Any] = None,
        default: Optional[Any] = None,
        type: Optional[Callable[[str], Any]] = None,
        choices: Optional[Sequence[Any]] = None,
        required: bool = False,
        help: Optional[str] = None,
        metavar: Optional[Union[str, tuple[str, ...]]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize the tracking store action.

        Parameters
        ----------
        option_strings : Sequence[str]
            The option strings for this action
        dest : str
            The attribute name to store the value
        nargs : Optional[Union[int, str]]
            Number of arguments to consume
        const : Optional[Any]
            Constant value for special cases
        default : Optional[Any]
            Default value if not provided
        type : Optional[Any]
            Type conversion function
        choices : Optional[Sequence[Any]]
            Valid choices for the argument
        required : bool
            Whether this argument is required
        help : Optional[str]
            Help text for the argument
        metavar : Optional[Union[str, tuple[str, ...]]]
            Display name for the argument value
        env : Optional[Mapping[str, str]]
            Environment consulted for a replacement default

        """
        key = env_key(dest)
        env_value = env.get(key) if env is not None else None
        if env_value is not None:
            try:
                candidate = type(env_value) if type is not None else env_value
                if choices is not None and candidate not in choices:
                    raise ValueError(f"expected one of {', '.join(map(str, choices))}")
                default = candidate
            except ValueError as exc:
                logger.warning("Invalid environment variable %s=%s: %s", key, env_value, exc)

        super().__init__(
            option_strings=option_strings,
            dest=dest,
            nargs=nargs,
            const=const,
            default=default,
            type=type,
            choices=choices,
            required=required,
            help=help,
            metavar=metavar,
        )

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Store the value and mark it as explicitly provided."""
        setattr(namespace, self.dest, values)
        mark_provided(namespace, self.dest)


class TrackingStoreTrueAction(argparse.Action):
    """Store-true action that tracks whether the flag was explicitly provided.

    ``BAP_<DEST>`` in ``env`` turns the default on when it reads as true.
    """

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        default: bool = False,
        required: bool = False,
        help: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize the tracking store_true action."""
        env_value = env.get(env_key(dest)) if env is not None else None
        if env_value is not None:
            default = env_value.strip().lower() in _TRUE_STRINGS

        super().__init__(
            option_strings=option_strings, dest=dest, nargs=0, const=True, default=default, required=required, help=help
        )

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Store True and mark as explicitly provided."""
        setattr(namespace, self.dest, True)
        mark_provided(namespace, self.dest)


class TrackingAppendAction(argparse.Action):
    """Append action that keeps command line order and tracks provided arguments."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Append the value to the destination list and mark it as provided."""
        # copy so a shared default list is never mutated
        items = list(getattr(namespace, self.dest, None) or [])
        items.append(values)
        setattr(namespace, self.dest, items)
        mark_provided(namespace, self.dest)


class TrackingAppendConstAction(argparse.Action):
    """Append ``const`` each time the flag appears.

    Used for the bare spelling of repeatable vopt flags (``--dump``) and for
    multi-select flags such as ``--labels-with-asm`` that share one
    destination.
    """

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        const: Any,
        default: Optional[Any] = None,
        required: bool = False,
        help: Optional[str] = None,
    ) -> None:
        """Initialize the action with the value appended per occurrence."""
        super().__init__(
            option_strings=option_strings, dest=dest, nargs=0, const=const, default=default, required=required, help=help
        )

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Append ``const`` and mark it as provided."""
        items = list(getattr(namespace, self.dest, None) or [])
        items.append(self.const)
        setattr(namespace, self.dest, items)
        mark_provided(namespace, self.dest)


class TrackingExplicitAction(TrackingStoreAction):
    """Store the value of a vopt flag given with an argument as ``Explicit``."""

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Wrap the converted value and mark it as provided."""
        setattr(namespace, self.dest, Explicit(values))
        mark_provided(namespace, self.dest)


class TrackingImplicitAction(argparse.Action):
    """Store the fixed default of a vopt flag given bare as ``Implicit``."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        const: Any,
        default: Optional[Any] = None,
        help: Optional[str] = None,
    ) -> None:
        """Initialize the action with the bare-flag default."""
        super().__init__(option_strings=option_strings, dest=dest, nargs=0, const=const, default=default, help=help)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Store ``Implicit(const)`` and mark it as provided."""
        setattr(namespace, self.dest, Implicit(self.const))
        mark_provided(namespace, self.dest)


class DynamicVersionAction(argparse._VersionAction):
    """Action that displays version information computed when it is requested."""

    def __init__(
        self, option_strings: Sequence[str], version_callback: Optional[Callable[[], str]] = None, **kwargs: Any
    ) -> None:
        """Initialize with a callback to get version dynamically.

        Parameters
        ----------
        option_strings : Sequence[str]
            Option strings for this action
        version_callback : callable, optional
            Function that returns the version string when called
        **kwargs : Any
            Additional keyword arguments passed to parent action

        """
        self.version_callback = version_callback

        kwargs.setdefault("version", "unknown")
        kwargs.setdefault("dest", argparse.SUPPRESS)
        kwargs.setdefault("default", argparse.SUPPRESS)

        super().__init__(option_strings, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Union[str, Sequence[Any], None],
        option_string: Optional[str] = None,
    ) -> None:
        """Display version and exit."""
        version = self.version
        if self.version_callback:
            version = self.version_callback()

        parser.exit(message=f"{version}\n")
