"""Exception types raised across festivalscope."""


class FestivalscopeError(Exception):
    """Base class for all festivalscope errors."""


class FetchError(FestivalscopeError):
    """Transport or deserialization failure from an upstream source."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class ParseError(FestivalscopeError):
    """A date or period string could not be parsed."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"cannot parse {value!r}: {reason}")
