"""Injection keys for dependencies that are not types."""

from typing import Any, Union


class Token:
    """A collision-safe injection key.

    Two tokens are never equal unless they are the same object, even when
    they share a name. Use a plain string instead when a global, name-based
    key is wanted.

    Args:
        name: A descriptive name used in messages and ``repr``.

    Examples:
        >>> NAIL_COLOR = Token("NAIL_COLOR")
        >>> NAIL_COLOR
        Token('NAIL_COLOR')
        >>> NAIL_COLOR == Token("NAIL_COLOR")
        False
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Token({self.name!r})"


InjectKey = Union[type, str, Token]


def same_key(left: Any, right: Any) -> bool:
    """Compare two injection keys.

    String names compare by value. Types and :class:`Token` objects compare
    by identity.

    Examples:
        >>> same_key("color", "color")
        True
        >>> same_key(Token("color"), Token("color"))
        False
    """
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return left is right


def key_name(key: Any) -> str:
    """Return a short human readable label for *key*."""
    if isinstance(key, str):
        return repr(key)
    if isinstance(key, Token):
        return key.name
    return getattr(key, "__name__", None) or repr(key)
