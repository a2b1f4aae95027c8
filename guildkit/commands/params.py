"""
Command Parameters

Declares the parameters a leaf command takes and binds text tokens to
them. A parameter list may end in a single "rest" parameter that absorbs
every remaining token as one string.
"""

import inspect
import re
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from guildkit.commands.arguments import join_rest
from guildkit.errors import ArgumentBindingError, CommandDefinitionError

_HASH_ID = re.compile(r"^[A-Za-z0-9]{8}$")

_TRUE = {"true", "yes", "y", "on", "1"}
_FALSE = {"false", "no", "n", "off", "0"}


def parse_bool(value: str) -> bool:
    """Parse yes/no style text into a bool."""
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def parse_hash_id(value: str) -> str:
    """Validate a Guilded hash identifier (8 alphanumeric characters)."""
    if not _HASH_ID.match(value):
        raise ValueError(f"Not a valid identifier: {value!r}")
    return str(value)


# Annotation -> converter, for parameters derived from a handler signature
CONVERTERS: dict[Any, Callable[[str], Any]] = {
    str: str,
    int: int,
    float: float,
    bool: parse_bool,
    uuid.UUID: uuid.UUID,
}


@dataclass(frozen=True)
class Parameter:
    """
    One declared command parameter.

    Attributes:
        name: Parameter name, used in help text and errors
        converter: Turns a token into a value; raises ValueError on bad input
        optional: Whether the parameter may be left unfilled
        default: Value used when an optional parameter is unfilled
        rest: Absorb all remaining tokens (last parameter only)
    """

    name: str
    converter: Callable[[str], Any] = str
    optional: bool = False
    default: Any = None
    rest: bool = False


def validate_signature(params: Sequence[Parameter]) -> None:
    """
    Check that a parameter list can be bound unambiguously.

    Raises:
        CommandDefinitionError: If an optional parameter precedes a required
            one, a rest parameter is not last, or names repeat
    """
    seen: set[str] = set()
    optional_seen = False
    for index, param in enumerate(params):
        if param.name in seen:
            raise CommandDefinitionError(f"Duplicate parameter '{param.name}'")
        seen.add(param.name)

        if param.rest and index != len(params) - 1:
            raise CommandDefinitionError(f"Rest parameter '{param.name}' must be last")

        if param.optional:
            optional_seen = True
        elif optional_seen:
            raise CommandDefinitionError(
                f"Required parameter '{param.name}' follows an optional one"
            )


def arity(params: Sequence[Parameter]) -> tuple[int, int | None]:
    """Get the (minimum, maximum) token count; maximum is None for rest."""
    minimum = sum(1 for param in params if not param.optional)
    if params and params[-1].rest:
        return minimum, None
    return minimum, len(params)


def accepts(params: Sequence[Parameter], count: int) -> bool:
    """Whether a parameter list can take this many tokens."""
    minimum, maximum = arity(params)
    return count >= minimum and (maximum is None or count <= maximum)


def bind(params: Sequence[Parameter], tokens: Sequence[str]) -> list[Any]:
    """
    Convert tokens into handler argument values.

    Args:
        params: Declared parameters
        tokens: Argument tokens following the command name

    Returns:
        One value per parameter, in declaration order

    Raises:
        ArgumentBindingError: On arity mismatch or a failed conversion
    """
    if not accepts(params, len(tokens)):
        raise ArgumentBindingError(
            f"Expected {_describe_arity(params)} argument(s), got {len(tokens)}"
        )

    values: list[Any] = []
    for index, param in enumerate(params):
        if param.rest:
            remaining = tokens[index:]
            raw = join_rest(remaining) if remaining else None
        else:
            raw = tokens[index] if index < len(tokens) else None

        if raw is None:
            values.append(param.default)
            continue

        try:
            values.append(param.converter(raw))
        except (ValueError, TypeError) as e:
            raise ArgumentBindingError(
                f"Invalid value for '{param.name}': {raw!r}"
            ) from e
    return values


def params_from_signature(handler: Callable[..., Any]) -> tuple[Parameter, ...]:
    """
    Derive parameters from a handler's signature.

    The first two positional parameters (tree and context) are skipped.
    Annotations pick the converter and defaults make a parameter optional.
    Capture-rest parameters must be declared explicitly.

    Raises:
        CommandDefinitionError: If the handler cannot take (tree, context)
    """
    signature = inspect.signature(handler)
    positional = [
        p
        for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) < 2:
        raise CommandDefinitionError(
            f"Command handler '{handler.__name__}' must accept (tree, context, ...)"
        )

    params: list[Parameter] = []
    for p in positional[2:]:
        annotation = p.annotation
        if isinstance(annotation, str):
            annotation = {"str": str, "int": int, "float": float, "bool": bool}.get(annotation, str)
        converter = CONVERTERS.get(annotation, str)
        optional = p.default is not p.empty
        params.append(
            Parameter(
                name=p.name,
                converter=converter,
                optional=optional,
                default=p.default if optional else None,
            )
        )
    return tuple(params)


def _describe_arity(params: Sequence[Parameter]) -> str:
    minimum, maximum = arity(params)
    if maximum is None:
        return f"at least {minimum}"
    if minimum == maximum:
        return str(minimum)
    return f"{minimum} to {maximum}"
