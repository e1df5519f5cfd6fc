"""Exception types raised at the edges of the Astrosonic pipeline."""


class AstrosonicError(Exception):
    """Base error for the Astrosonic package."""


class InvalidChartError(AstrosonicError):
    """Raised when a chart or transit payload cannot be validated."""


class ConfigError(AstrosonicError):
    """Raised when a settings file cannot be read or validated."""
