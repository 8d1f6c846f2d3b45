"""Exceptions raised by RiskSizer."""

from typing import List, Optional


class RiskSizerError(ValueError):
    """Base class for RiskSizer errors."""


class UnknownInstrumentError(RiskSizerError):
    """Instrument identifier missing from the point value table."""

    def __init__(self, instrument: str, known: Optional[List[str]] = None):
        self.instrument = instrument
        self.known = known or []
        msg = f"Unknown instrument {instrument!r}"
        if self.known:
            msg += f" (expected one of: {', '.join(self.known)})"
        super().__init__(msg)


class InvalidInputError(RiskSizerError):
    """A form field holds text that is not a usable value."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}: {reason} (got {value!r})")
