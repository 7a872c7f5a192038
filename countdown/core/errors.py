from __future__ import annotations


class CountdownError(Exception):
    """Base class for every error the timer core raises on purpose."""


class ValidationError(CountdownError, ValueError):
    """Bad user input: unparseable duration text or an empty name."""


class ParseError(ValidationError):
    pass


class EligibilityError(CountdownError):
    """The timer is not in a state that allows the requested operation."""


class TimerIndexError(CountdownError, IndexError):
    pass


class PersistenceError(CountdownError):
    pass


class ConfigError(CountdownError):
    pass
