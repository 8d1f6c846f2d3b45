"""
Instrument Registry
===================
Resolves the dollar value of a one-point move per contract for each
supported instrument and contract size class.

The table is plain data: adding an instrument means adding a row, either
here in DEFAULT_POINT_VALUES or through the INSTRUMENTS setting.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional

from loguru import logger

from risksizer.core.errors import UnknownInstrumentError


NON_INDEX = "Non-index"
NON_INDEX_POINT_VALUE = 1.0


@dataclass(frozen=True)
class PointValue:
    """Point values for one instrument."""
    standard: float
    micro: float

    def for_size(self, is_micro: bool) -> float:
        return self.micro if is_micro else self.standard


DEFAULT_POINT_VALUES: Dict[str, PointValue] = {
    "ES": PointValue(standard=50.0, micro=5.0),
    "NQ": PointValue(standard=20.0, micro=2.0),
}


class InstrumentRegistry:
    """
    Closed set of tradable instruments and their point values.

    The non-index instrument is always available and always worth 1 per
    point; every other identifier must be present in the table.

    Usage:
        registry = InstrumentRegistry.from_string("ES:50:5,NQ:20:2")
        registry.point_value("ES", is_micro=True)   # 5.0
        registry.point_value("Non-index", True)     # 1.0
    """

    def __init__(self, table: Optional[Mapping[str, PointValue]] = None):
        table = dict(DEFAULT_POINT_VALUES if table is None else table)

        errors = []
        for name, value in table.items():
            if not name or name == NON_INDEX:
                errors.append(f"invalid instrument identifier {name!r}")
            elif not all(math.isfinite(v) and v > 0 for v in (value.standard, value.micro)):
                errors.append(f"{name}: point values must be positive finite numbers")
        if errors:
            raise ValueError(f"Invalid point value table: {errors}")

        self._table = table
        logger.debug(f"Instrument registry loaded: {', '.join(self.instruments)}")

    @classmethod
    def from_string(cls, text: str) -> "InstrumentRegistry":
        """
        Build a registry from a "NAME:STANDARD:MICRO" comma separated list.

        Raises:
            ValueError: if an entry is malformed
        """
        table: Dict[str, PointValue] = {}
        for entry in filter(None, (part.strip() for part in text.split(","))):
            fields = [f.strip() for f in entry.split(":")]
            if len(fields) != 3:
                raise ValueError(f"Instrument entry must be NAME:STANDARD:MICRO, got {entry!r}")
            name, standard, micro = fields
            try:
                table[name] = PointValue(standard=float(standard), micro=float(micro))
            except ValueError:
                raise ValueError(f"Non-numeric point value in instrument entry {entry!r}") from None
        return cls(table)

    @property
    def instruments(self) -> Iterable[str]:
        """Selectable identifiers, non-index last."""
        return [*self._table.keys(), NON_INDEX]

    def is_known(self, instrument: str) -> bool:
        return instrument == NON_INDEX or instrument in self._table

    def validate_instrument(self, instrument: str) -> str:
        """Return the identifier unchanged, or raise if it is not configured."""
        if not self.is_known(instrument):
            raise UnknownInstrumentError(instrument, list(self.instruments))
        return instrument

    def supports_micro(self, instrument: str) -> bool:
        return instrument != NON_INDEX

    def point_value(self, instrument: str, is_micro: bool = False) -> float:
        """Dollar value of a one-point move for one contract."""
        if instrument == NON_INDEX:
            return NON_INDEX_POINT_VALUE
        try:
            return self._table[instrument].for_size(is_micro)
        except KeyError:
            raise UnknownInstrumentError(instrument, list(self.instruments)) from None

    def __repr__(self) -> str:
        rows = ", ".join(f"{k}={v.standard:g}/{v.micro:g}" for k, v in self._table.items())
        return f"InstrumentRegistry({rows})"
