"""
RiskSizer: position sizing for index futures and generic instruments
====================================================================
Computes the largest contract count that keeps a trade within the
account's risk budget, the dollar risk at that size, and the
risk/reward ratio.
"""

__version__ = "1.0.0"

from risksizer.core import (
    NON_INDEX,
    TOO_MUCH_RISK,
    InstrumentRegistry,
    SizingResult,
    TradeRequest,
    UndefinedRisk,
    compute_sizing,
)
