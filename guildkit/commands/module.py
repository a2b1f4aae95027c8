"""
Command Modules

Declarative surface for bot commands. Commands are registered with
decorators and turned into an immutable CommandTree on first use.

Usage:
    commands = CommandModule(prefix="!")

    @commands.command("ping", aliases=("p",))
    async def ping(tree, context):
        await context.reply("Pong!")

    admin = commands.group("admin")

    @admin.command("ban", params=[Parameter("user", parse_hash_id)])
    async def ban(tree, context, user):
        ...

    client.add_commands(commands)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, Union

import structlog

from guildkit.commands.arguments import split_arguments
from guildkit.commands.params import Parameter, params_from_signature
from guildkit.commands.tree import (
    CommandContext,
    CommandHandler,
    CommandNode,
    CommandTree,
    ContainerCommand,
    FailedCommand,
    LeafCommand,
)
from guildkit.errors import CommandDefinitionError
from guildkit.events.channel import Subscription

if TYPE_CHECKING:
    from guildkit.client.base import BaseClient
    from guildkit.events.models import MessageEvent

logger = structlog.get_logger(__name__)


class _CommandBuilder:
    """Collects commands and groups in declaration order."""

    def __init__(self, commands: Iterable[CommandNode] = ()) -> None:
        self._entries: list[Union[CommandNode, CommandGroup]] = list(commands)
        self._frozen = False

    def _check_open(self) -> None:
        if self._frozen:
            raise CommandDefinitionError("Commands cannot be added after the tree is built")

    def add(self, node: CommandNode) -> CommandNode:
        """Add an already-built command node."""
        self._check_open()
        self._entries.append(node)
        return node

    def command(
        self,
        name: str | None = None,
        *,
        aliases: Sequence[str] = (),
        params: Sequence[Parameter] | None = None,
        description: str | None = None,
    ) -> Callable[[CommandHandler], CommandHandler]:
        """
        Decorator registering a leaf command.

        Args:
            name: Command name (defaults to the function name)
            aliases: Other names the command answers to
            params: Declared parameters; derived from the signature if omitted
            description: Help text (defaults to the docstring's first line)

        Returns:
            The decorator; the handler itself is returned unchanged
        """

        def decorator(handler: CommandHandler) -> CommandHandler:
            self._check_open()
            declared = params_from_signature(handler) if params is None else tuple(params)
            doc = (handler.__doc__ or "").strip().splitlines()
            self._entries.append(
                LeafCommand(
                    name=name or handler.__name__,
                    handler=handler,
                    aliases=tuple(aliases),
                    params=declared,
                    description=description if description is not None else (doc[0] if doc else ""),
                )
            )
            return handler

        return decorator

    def group(
        self,
        name: str,
        *,
        aliases: Sequence[str] = (),
        description: str = "",
    ) -> CommandGroup:
        """Register a container command and return its builder."""
        self._check_open()
        group = CommandGroup(name, aliases=aliases, description=description)
        self._entries.append(group)
        return group

    def _build_tree(self) -> CommandTree:
        self._frozen = True
        nodes: list[CommandNode] = []
        for entry in self._entries:
            if isinstance(entry, CommandGroup):
                nodes.append(entry.build_node())
            else:
                nodes.append(entry)
        return CommandTree(nodes)


class CommandGroup(_CommandBuilder):
    """Builder for a container command and its sub-commands."""

    def __init__(
        self,
        name: str,
        *,
        aliases: Sequence[str] = (),
        description: str = "",
        commands: Iterable[CommandNode] = (),
    ) -> None:
        super().__init__(commands)
        self.name = name
        self.aliases = tuple(aliases)
        self.description = description

    def build_node(self) -> ContainerCommand:
        return ContainerCommand(
            name=self.name,
            tree=self._build_tree(),
            aliases=self.aliases,
            description=self.description,
        )


class CommandModule(_CommandBuilder):
    """
    A set of bot commands sharing one prefix.

    The tree is built once, on the first call to build(); commands cannot
    be added afterwards.
    """

    def __init__(self, prefix: str = "!", commands: Iterable[CommandNode] = ()) -> None:
        """
        Initialize a command module.

        Args:
            prefix: Text a message must start with to be treated as a command
            commands: Already-built nodes to start with
        """
        if not prefix:
            raise CommandDefinitionError("Command prefix cannot be empty")
        super().__init__(commands)
        self.prefix = prefix
        self._tree: CommandTree | None = None

    def build(self) -> CommandTree:
        """Get the root command tree, building it on first use."""
        if self._tree is None:
            self._tree = self._build_tree()
            logger.debug("Built command tree", prefix=self.prefix, commands=len(self._tree))
        return self._tree

    @property
    def tree(self) -> CommandTree:
        return self.build()

    async def handle_message(self, event: MessageEvent, client: BaseClient | None = None) -> None:
        """
        Run the command in a message, if it has one.

        Messages without the prefix, system messages and the client's own
        messages are ignored.

        Args:
            event: The message event
            client: Client used by handlers to reply
        """
        message = event.message
        if message.is_system:
            return

        me = getattr(client, "me", None)
        if me is not None and message.created_by == me.id:
            return

        content = message.content
        if not content.startswith(self.prefix):
            return

        tokens = split_arguments(content[len(self.prefix):])
        context = CommandContext(
            message_event=event,
            prefix=self.prefix,
            root_command_name=tokens[0] if tokens else "",
            root_arguments=tuple(tokens[1:]),
            client=client,
        )
        await self.build().resolve(context, tokens)

    def add_to(self, client: BaseClient) -> Subscription[MessageEvent]:
        """
        Run commands from every message the client receives.

        Returns:
            The message subscription; unsubscribe it to detach the module
        """
        tree = self.build()
        logger.info("Command module attached", prefix=self.prefix, commands=len(tree))

        async def on_message(event: MessageEvent) -> None:
            await self.handle_message(event, client)

        return client.message_created.subscribe(on_message)

    def on_failed(self, callback: Callable[[FailedCommand], Any]) -> list[Subscription[FailedCommand]]:
        """Subscribe to failures of the root tree and every nested tree."""
        return [tree.failed.subscribe(callback) for tree in self.build().walk()]
