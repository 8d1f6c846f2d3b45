"""
Form input parsing.

Raw field values arrive as text (from flags, the settings store, or a form)
and may be blank or malformed. Blank means "not filled in yet" and becomes
None; anything else must parse to a usable number or InvalidInputError is
raised before the engine ever runs.
"""

import math
from typing import Optional, Union

from risksizer.core.errors import InvalidInputError
from risksizer.core.instruments import InstrumentRegistry
from risksizer.core.sizing import TradeRequest
from risksizer.utils.utils import is_on_step


DEFAULT_RISK_PCT = 0.125
MIN_RISK_PCT = 0.125
MAX_RISK_PCT = 5.0
RISK_STEP = 0.125

RawValue = Union[str, float, int, None]


def _is_blank(raw: RawValue) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def parse_price(field: str, raw: RawValue) -> Optional[float]:
    """Parse a positive amount; blank gives None."""
    if _is_blank(raw):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidInputError(field, raw, "not a number") from None
    if not math.isfinite(value):
        raise InvalidInputError(field, raw, "must be a finite number")
    if value <= 0:
        raise InvalidInputError(field, raw, "must be greater than zero")
    return value


def parse_risk_percentage(
    raw: RawValue,
    default: float = DEFAULT_RISK_PCT,
    minimum: float = MIN_RISK_PCT,
    maximum: float = MAX_RISK_PCT,
    step: float = RISK_STEP,
) -> float:
    """
    Parse the max risk percentage (0.125 means 0.125% of the balance).

    Blank falls back to the default. Values must lie in [minimum, maximum]
    on the step grid starting at minimum.
    """
    if _is_blank(raw):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidInputError("max_risk_percentage", raw, "not a number") from None
    if not minimum <= value <= maximum:
        raise InvalidInputError(
            "max_risk_percentage", raw, f"must be between {minimum:g} and {maximum:g}"
        )
    if not is_on_step(value, step, origin=minimum):
        raise InvalidInputError("max_risk_percentage", raw, f"must be a multiple of {step:g}")
    return value


def parse_flag(raw: Union[str, bool, None]) -> bool:
    """Parse the micro toggle; only true/"true" switch it on."""
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() == "true"


def parse_trade_request(
    registry: InstrumentRegistry,
    account_balance: RawValue,
    max_risk_percentage: RawValue,
    instrument: str,
    is_micro: Union[str, bool, None],
    entry: RawValue,
    stop_loss: RawValue,
    take_profit: RawValue = None,
    **risk_limits,
) -> TradeRequest:
    """
    Build a TradeRequest from raw form values.

    Args:
        registry: Instrument registry used to validate the instrument
        risk_limits: Optional default/minimum/maximum/step overrides for
            the risk percentage

    Raises:
        InvalidInputError: a field holds unusable text
        UnknownInstrumentError: instrument is not configured
    """
    registry.validate_instrument(instrument)

    return TradeRequest(
        account_balance=parse_price("account_balance", account_balance),
        max_risk_percentage=parse_risk_percentage(max_risk_percentage, **risk_limits),
        instrument=instrument,
        is_micro=parse_flag(is_micro) and registry.supports_micro(instrument),
        entry_price=parse_price("entry_price", entry),
        stop_loss_price=parse_price("stop_loss_price", stop_loss),
        take_profit_price=parse_price("take_profit_price", take_profit),
    )
