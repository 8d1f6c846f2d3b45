"""
RiskSizer Core Package
Instrument point values, input parsing and the sizing engine
"""

from risksizer.core.errors import InvalidInputError, RiskSizerError, UnknownInstrumentError
from risksizer.core.instruments import NON_INDEX, InstrumentRegistry, PointValue
from risksizer.core.sizing import TOO_MUCH_RISK, SizingResult, TradeRequest, UndefinedRisk, compute_sizing
from risksizer.core.inputs import parse_trade_request

__all__ = [
    "InvalidInputError",
    "RiskSizerError",
    "UnknownInstrumentError",
    "NON_INDEX",
    "InstrumentRegistry",
    "PointValue",
    "TOO_MUCH_RISK",
    "SizingResult",
    "TradeRequest",
    "UndefinedRisk",
    "compute_sizing",
    "parse_trade_request",
]
