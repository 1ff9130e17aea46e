"""
Command Registry

Static table of prompt commands. Each command is identified by its verb
path (e.g. "room create"), carries a dataclass describing its options and a
handler called with (context, options, sink).

Options are declared as dataclass fields created with option(). A parser
is built from those fields when the command is registered:
    - bool fields become flags (--verbose)
    - int and str fields take one argument (--name NAME)
    - fields without a default are required

Usage:
    @dataclass
    class PingOptions:
        knowledge: int = option(0, short="k", help="tick id known")

    registry = CommandRegistry()
    registry.register("ping", "ping the server", on_ping, PingOptions)
    registry.dispatch("ping --knowledge 4", context, sink)
"""

import argparse
import logging
import shlex
from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import (
    ERR_COMMAND_NOT_FOUND,
    ERR_INCOMPLETE_COMMAND,
    ERR_INVALID_OPTIONS,
    ERR_SYNTAX,
    CommandError,
)
from .output import OutputSink

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Any, OutputSink], None]


def option(
    default: Any = MISSING,
    *,
    name: Optional[str] = None,
    short: Optional[str] = None,
    help: str = "",
):
    """
    Declare a command option as a dataclass field.

    Args:
        default: Default value; omit to make the option required
        name: Long option name if it differs from the field name
        short: Single-letter alias
        help: Help text shown by the "help" command
    """
    metadata = {"name": name, "short": short, "help": help}
    if default is MISSING:
        return field(metadata=metadata)
    return field(default=default, metadata=metadata)


class _OptionParser(argparse.ArgumentParser):
    """Argument parser that reports errors instead of exiting."""

    def error(self, message):
        raise CommandError(ERR_INVALID_OPTIONS, f"{self.prog}: {message}")

    def exit(self, status=0, message=None):
        raise CommandError(ERR_INVALID_OPTIONS, message or self.prog)


@dataclass(frozen=True)
class CommandDescriptor:
    """
    One entry of the command table.

    Attributes:
        path: Verb tokens, e.g. ("room", "create")
        description: One-line description for help output
        handler: Callable invoked on dispatch; None for command groups
        options_type: Dataclass describing the options, or None
    """

    path: Tuple[str, ...]
    description: str
    handler: Optional[Handler] = None
    options_type: Optional[type] = None

    @property
    def name(self) -> str:
        return " ".join(self.path)

    @property
    def is_group(self) -> bool:
        return self.handler is None


def _option_flags(f) -> List[str]:
    flags = ["--" + (f.metadata.get("name") or f.name)]
    if f.metadata.get("short"):
        flags.append("-" + f.metadata["short"])
    return flags


def _build_parser(descriptor: CommandDescriptor) -> _OptionParser:
    parser = _OptionParser(
        prog=descriptor.name, add_help=False, allow_abbrev=False
    )
    if descriptor.options_type is None:
        return parser

    for f in fields(descriptor.options_type):
        kwargs: Dict[str, Any] = {
            "dest": f.name,
            "help": f.metadata.get("help", ""),
        }
        if f.type is bool:
            kwargs["action"] = "store_true"
        else:
            kwargs["type"] = f.type
            kwargs["metavar"] = f.name.upper()
        if f.default is MISSING:
            kwargs["required"] = True
        else:
            kwargs["default"] = f.default
        parser.add_argument(*_option_flags(f), **kwargs)
    return parser


class CommandRegistry:
    """Command table with resolution, option parsing and usage output."""

    def __init__(self):
        self._commands: Dict[Tuple[str, ...], CommandDescriptor] = {}
        self._parsers: Dict[Tuple[str, ...], _OptionParser] = {}

    def register(
        self,
        path: str,
        description: str,
        handler: Optional[Handler] = None,
        options_type: Optional[type] = None,
    ) -> CommandDescriptor:
        """
        Add a command or command group.

        Args:
            path: Space-separated verb path, e.g. "room create"
            description: One-line description
            handler: Handler, or None to register a group
            options_type: Dataclass built with option() fields

        Returns:
            The registered CommandDescriptor

        Raises:
            ValueError: If the path is taken or its parent group is missing
        """
        tokens = tuple(path.split())
        if not tokens:
            raise ValueError("command path must not be empty")
        if tokens in self._commands:
            raise ValueError(f"command '{path}' already registered")
        if len(tokens) > 1:
            parent = self._commands.get(tokens[:-1])
            if parent is None or not parent.is_group:
                raise ValueError(f"no command group for '{path}'")

        descriptor = CommandDescriptor(
            path=tokens,
            description=description,
            handler=handler,
            options_type=options_type,
        )
        self._commands[tokens] = descriptor
        if handler is not None:
            self._parsers[tokens] = _build_parser(descriptor)
        return descriptor

    @property
    def commands(self) -> List[CommandDescriptor]:
        """Registered descriptors in registration order."""
        return list(self._commands.values())

    def resolve(self, line: str) -> Tuple[CommandDescriptor, Any]:
        """
        Find the command for a line and parse its options.

        The deepest registered path matching the leading tokens wins; the
        remaining tokens are parsed as options.

        Returns:
            (descriptor, options) where options is an instance of the
            descriptor's options_type, or None if it has none

        Raises:
            CommandError: If no command matches, a group is named without
                a subcommand, or the options are malformed
        """
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            raise CommandError(ERR_SYNTAX, str(e))

        descriptor = None
        depth = 0
        for length in range(1, len(tokens) + 1):
            candidate = self._commands.get(tuple(tokens[:length]))
            if candidate is None:
                break
            descriptor, depth = candidate, length

        if descriptor is None:
            raise CommandError(ERR_COMMAND_NOT_FOUND, f"unknown command '{line}'")

        remaining = tokens[depth:]
        if descriptor.is_group:
            if remaining:
                raise CommandError(
                    ERR_COMMAND_NOT_FOUND,
                    f"unknown command '{descriptor.name} {remaining[0]}'",
                )
            raise CommandError(
                ERR_INCOMPLETE_COMMAND,
                f"'{descriptor.name}' needs a subcommand",
            )

        namespace = self._parsers[descriptor.path].parse_args(remaining)
        if descriptor.options_type is None:
            return descriptor, None
        return descriptor, descriptor.options_type(**vars(namespace))

    def dispatch(self, line: str, context: Any, sink: OutputSink) -> None:
        """
        Resolve a line and invoke its handler exactly once.

        Raises:
            CommandError: If the line cannot be resolved; no handler is
                called in that case
        """
        descriptor, options = self.resolve(line)
        logger.debug("Dispatching '%s' with %s", descriptor.name, options)
        descriptor.handler(context, options, sink)

    def write_usage(self, sink: OutputSink) -> None:
        """Write the command tree with per-option help."""
        for descriptor in self._commands.values():
            indent = "  " * (len(descriptor.path) - 1)
            sink.write(indent + descriptor.name, style="bold cyan")
            sink.write(f"  {descriptor.description}\n")
            if descriptor.options_type is None:
                continue
            for f in fields(descriptor.options_type):
                flags = ", ".join(_option_flags(f))
                sink.write(f"{indent}    {flags}", style="green")
                text = f.metadata.get("help", "")
                if f.default is MISSING:
                    text += " (required)"
                elif f.type is not bool:
                    text += f" (default: {f.default})"
                sink.write(f"  {text}\n")
