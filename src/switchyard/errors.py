"""Switchyard exception hierarchy.

Shared across the route table, the dispatcher and the Mux so every
module raises and catches the same types.
"""


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when static configuration is invalid.

    Always raised at registration time, never while serving.
    """


class PatternError(ConfigurationError):
    """A route pattern could not be compiled.

    Carries the offending pattern so startup failures point straight at
    the registration that caused them.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")
