"""Shared type aliases used across switchyard modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Handler or filter — called as fn(writer, request), sync or async
Handler: TypeAlias = Callable[..., Any]

# Method key for handlers registered without a method
ANY_METHOD = "*"
