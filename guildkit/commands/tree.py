"""
Command Tree

Resolves a command invocation (a name followed by argument tokens) down
to a leaf command, binds its arguments and invokes its handler. Nodes are
either leaves (with a handler) or containers (with a nested tree).

Resolution never raises for "no match": it publishes a FailedCommand on
the tree's ``failed`` channel instead. Handler exceptions propagate.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

import structlog

from guildkit.commands.params import Parameter, accepts, bind, validate_signature
from guildkit.errors import ArgumentBindingError
from guildkit.events.channel import Channel

if TYPE_CHECKING:
    from guildkit.events.models import MessageEvent

logger = structlog.get_logger(__name__)

# handler(tree, context, *values)
CommandHandler = Callable[..., Awaitable[Any]]


class FallbackType(Enum):
    """Why a command could not be resolved."""

    UNSPECIFIED = "unspecified"  # no command name given
    NOT_FOUND = "not_found"  # nothing matched by name, arity or argument types


@dataclass(frozen=True)
class CommandContext:
    """
    Everything known about one command invocation.

    Contexts are never mutated; each level of resolution narrows the
    parent context into a new one.
    """

    message_event: MessageEvent | Any
    prefix: str
    root_command_name: str
    root_arguments: tuple[str, ...] = ()
    command_name: str = ""
    arguments: tuple[str, ...] = ()
    client: Any = None

    @property
    def message(self) -> Any:
        return getattr(self.message_event, "message", None)

    def narrow(self, command_name: str, arguments: Sequence[str]) -> CommandContext:
        """Get a context for a sub-command and its remaining tokens."""
        return dataclasses.replace(
            self,
            command_name=command_name,
            arguments=tuple(arguments),
        )

    async def reply(self, content: str, **kwargs: Any) -> Any:
        """
        Reply to the invoking message in the same channel.

        Raises:
            RuntimeError: If the context has no client
        """
        if self.client is None:
            raise RuntimeError("Cannot reply: command context has no client")
        message = self.message
        return await self.client.create_message(
            message.channel_id,
            content,
            reply_message_ids=[message.id],
            **kwargs,
        )


@dataclass(frozen=True)
class FailedCommand:
    """Published when a command could not be resolved."""

    context: CommandContext
    reason: FallbackType


@dataclass(frozen=True)
class LeafCommand:
    """An invocable command with a handler and declared parameters."""

    name: str
    handler: CommandHandler
    aliases: tuple[str, ...] = ()
    params: tuple[Parameter, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", tuple(self.aliases))
        object.__setattr__(self, "params", tuple(self.params))
        validate_signature(self.params)

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def has_name(self, name: str) -> bool:
        """Exact, case-sensitive match against the name and aliases."""
        return name in self.names

    def accepts(self, arguments: Sequence[str]) -> bool:
        """Whether the argument count fits the declared parameters."""
        return accepts(self.params, len(arguments))

    def bind(self, arguments: Sequence[str]) -> list[Any]:
        return bind(self.params, arguments)


@dataclass(frozen=True)
class ContainerCommand:
    """A command that only groups sub-commands."""

    name: str
    tree: CommandTree
    aliases: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "aliases", tuple(self.aliases))

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def has_name(self, name: str) -> bool:
        """Exact, case-sensitive match against the name and aliases."""
        return name in self.names

    def accepts(self, arguments: Sequence[str]) -> bool:
        # Remaining tokens are left to the nested tree
        return True


CommandNode = Union[LeafCommand, ContainerCommand]


class CommandTree:
    """
    An ordered, immutable set of command nodes.

    Usage:
        async def ping(tree, context):
            await context.reply("Pong!")

        tree = CommandTree([LeafCommand("ping", ping)])
        tree.failed.subscribe(on_failed)

        await tree.resolve(context, ["ping"])
    """

    def __init__(self, commands: Iterable[CommandNode] = ()) -> None:
        """
        Initialize a tree.

        Args:
            commands: Nodes in declaration order; earlier nodes win ties
        """
        self.commands: tuple[CommandNode, ...] = tuple(commands)
        self.failed: Channel[FailedCommand] = Channel("failed_command")

    def filter_by_name(self, name: str) -> list[CommandNode]:
        """All nodes with this name or alias, in declaration order."""
        return [command for command in self.commands if command.has_name(name)]

    async def resolve(self, context: CommandContext, arguments: Sequence[str]) -> None:
        """
        Resolve and invoke a command.

        Exactly one of these happens: a nested tree is delegated to, one
        handler is invoked, or a FailedCommand is published.

        Args:
            context: Context of the invocation so far
            arguments: Command name followed by its argument tokens
        """
        if not arguments:
            await self._fail(context, FallbackType.UNSPECIFIED)
            return

        name, rest = arguments[0], list(arguments[1:])
        narrowed = context.narrow(name, rest)

        chosen = next(
            (command for command in self.filter_by_name(name) if command.accepts(rest)),
            None,
        )

        if isinstance(chosen, ContainerCommand):
            logger.debug("Delegating to sub-commands", command=name)
            await chosen.tree.resolve(narrowed, rest)
            return

        if chosen is None:
            await self._fail(narrowed, FallbackType.NOT_FOUND)
            return

        try:
            values = chosen.bind(rest)
        except ArgumentBindingError as e:
            logger.debug("Command arguments rejected", command=name, error=str(e))
            await self._fail(narrowed, FallbackType.NOT_FOUND)
            return

        logger.debug("Invoking command", command=name, arguments=len(values))
        await chosen.handler(self, narrowed, *values)

    def walk(self) -> Iterator[CommandTree]:
        """Yield this tree and every nested tree, depth first."""
        yield self
        for command in self.commands:
            if isinstance(command, ContainerCommand):
                yield from command.tree.walk()

    async def _fail(self, context: CommandContext, reason: FallbackType) -> None:
        logger.debug("Command not resolved", command=context.command_name, reason=reason.value)
        await self.failed.publish(FailedCommand(context, reason))

    def __len__(self) -> int:
        return len(self.commands)

    def __iter__(self) -> Iterator[CommandNode]:
        return iter(self.commands)

    def __repr__(self) -> str:
        return f"CommandTree(commands={[command.name for command in self.commands]})"
