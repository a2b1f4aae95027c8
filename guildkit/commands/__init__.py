"""Bot command trees and the decorator surface used to declare them."""

from .arguments import Argument, join_rest, split_arguments
from .module import CommandGroup, CommandModule
from .params import (
    Parameter,
    accepts,
    bind,
    parse_bool,
    parse_hash_id,
    params_from_signature,
    validate_signature,
)
from .tree import (
    CommandContext,
    CommandNode,
    CommandTree,
    ContainerCommand,
    FailedCommand,
    FallbackType,
    LeafCommand,
)

__all__ = [
    # Declaration
    "CommandGroup",
    "CommandModule",
    "Parameter",
    "params_from_signature",
    "validate_signature",
    # Tree
    "CommandContext",
    "CommandNode",
    "CommandTree",
    "ContainerCommand",
    "FailedCommand",
    "FallbackType",
    "LeafCommand",
    # Arguments
    "Argument",
    "accepts",
    "bind",
    "join_rest",
    "parse_bool",
    "parse_hash_id",
    "split_arguments",
]
