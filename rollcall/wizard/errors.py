"""Errors raised by the attendance/activity wizard."""


class WizardError(Exception):
    """Base class for wizard errors surfaced to the hosting UI."""


class UnknownActivityError(WizardError, KeyError):
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown activity type: {self.key!r}"


class InvalidCountError(WizardError, ValueError):
    """Activity counts must be non-negative integers."""


class NoClassSelectedError(WizardError):
    """Raised when an operation needs a class and none was selected."""
