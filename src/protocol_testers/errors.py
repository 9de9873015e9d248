from __future__ import annotations

from typing import Any, Optional


class TesterError(Exception):
    pass


class ConfigError(TesterError, ValueError):
    """Tester configuration cannot be turned into a working client."""


class InvalidRequestError(TesterError):
    """The harness handed an executor something that is not its envelope type.

    This is a wiring bug upstream, so retrying it never helps.
    """


class InvalidResponseError(TesterError):
    """The exchange completed but the response failed validation.

    ``response`` holds what was actually received, or ``None`` when the
    adapter returned something of the wrong type.
    """

    def __init__(self, message: str, response: Optional[Any] = None) -> None:
        super().__init__(message)
        self.response = response


class InvalidResponseStatusError(InvalidResponseError):
    pass


def type_name(obj: Any) -> str:
    t = type(obj)
    if t.__module__ == "builtins":
        return t.__qualname__
    return f"{t.__module__}.{t.__qualname__}"
