"""Pattern compiler.

Turns an Express-style route pattern into a compiled regex plus the
ordered parameter names bound to its capture groups::

    "/user/:id"            -> ^/user/([^/]+)$        ("id",)
    "/user/:id([0-9]+)"    -> ^/user/([0-9]+)$       ("id",)
    "/person/:last/:first" -> ^/person/([^/]+)/([^/]+)$  ("last", "first")

Literal segments match verbatim. A parameter's capture expression runs
from its opening parenthesis to the end of the segment, so it cannot
contain ``/``.
"""

import re
from dataclasses import dataclass

from switchyard.errors import PatternError

PARAM_MARKER = ":"
DEFAULT_CAPTURE = r"[^/]+"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A route pattern compiled for full-path matching.

    ``param_names[i]`` is the name bound to capture group ``i + 1``.
    """

    pattern: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> list[tuple[str, str]] | None:
        """Match *path* in full and return the bound ``(name, value)`` pairs.

        Returns ``None`` when the path does not match. A partial match is
        not a match: ``/:id`` does not match ``/admin/profile``.
        """
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return [
            (name, value)
            for name, value in zip(self.param_names, m.groups(), strict=True)
            if value is not None
        ]


def has_params(pattern: str) -> bool:
    """True if *pattern* contains at least one parameter segment."""
    return any(part.startswith(PARAM_MARKER) for part in pattern.split("/"))


def compile_pattern(pattern: str, default_capture: str = DEFAULT_CAPTURE) -> CompiledPattern:
    """Compile *pattern* into a ``CompiledPattern``.

    Raises ``PatternError`` for an invalid capture expression, an unnamed
    parameter, or a capture expression that does not contain exactly one
    capturing group. These are startup errors: nothing is recompiled per
    request.
    """
    parts = pattern.split("/")
    names: list[str] = []

    for i, part in enumerate(parts):
        if not part.startswith(PARAM_MARKER):
            parts[i] = re.escape(part)
            continue

        name, paren, rest = part[len(PARAM_MARKER) :].partition("(")
        if not name:
            raise PatternError(pattern, f"parameter segment {part!r} has no name")
        # similar to expressjs: /user/:id([0-9]+)
        expr = paren + rest if paren else f"({default_capture})"
        try:
            groups = re.compile(expr).groups
        except re.error as exc:
            raise PatternError(pattern, f"bad expression for :{name}: {exc}") from exc
        if groups != 1:
            raise PatternError(
                pattern,
                f"expression for :{name} must contain exactly one capturing group, found {groups}",
            )
        names.append(name)
        parts[i] = expr

    source = "/".join(parts)
    try:
        regex = re.compile(source)
    except re.error as exc:
        raise PatternError(pattern, str(exc)) from exc

    return CompiledPattern(pattern=pattern, regex=regex, param_names=tuple(names))
