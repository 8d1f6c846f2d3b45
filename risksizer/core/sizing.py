"""
Position Sizing Engine
======================
Turns a trade definition into a contract count that respects the account's
risk budget.

The engine is a pure function: no I/O, no state between calls, identical
inputs give identical results. It always recommends at least one contract.
When that single contract already risks more than the budget allows, the
result carries the TOO_MUCH_RISK marker instead of a count.

Outcomes of compute_sizing():
    None           - balance, entry or stop not filled in yet
    UndefinedRisk  - entry equals stop, or an amount overflows a float
    SizingResult   - a sizing decision (possibly TOO_MUCH_RISK)
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from loguru import logger

from risksizer.core.instruments import NON_INDEX
from risksizer.utils.utils import round_money


TOO_MUCH_RISK = "Too much risk"


@dataclass(frozen=True)
class TradeRequest:
    """Parsed form values for one calculation."""
    account_balance: Optional[float]
    max_risk_percentage: float
    instrument: str
    is_micro: bool
    entry_price: Optional[float]
    stop_loss_price: Optional[float]
    take_profit_price: Optional[float] = None

    def __post_init__(self):
        # Micro contracts only exist for index futures
        if self.instrument == NON_INDEX and self.is_micro:
            object.__setattr__(self, "is_micro", False)

    @property
    def is_complete(self) -> bool:
        return (
            self.account_balance is not None
            and self.entry_price is not None
            and self.stop_loss_price is not None
        )


@dataclass(frozen=True)
class SizingResult:
    """
    Sizing decision for one trade.

    contracts, risk_amount and risk_reward_ratio are display-ready; the
    remaining fields are the unrounded values they were derived from.
    """
    contracts: Union[int, str]
    risk_amount: Decimal
    risk_reward_ratio: Optional[Decimal]

    point_value: float
    risk_per_point: float
    max_risk_amount: float
    actual_risk_amount: float

    @property
    def risk_exceeded(self) -> bool:
        return self.contracts == TOO_MUCH_RISK


ZERO_RISK = "Stop loss equals entry price, risk is undefined"
RISK_OVERFLOW = "Risk per contract is too large to compute"
SIZE_OVERFLOW = "Position size is too large to compute"
REWARD_OVERFLOW = "Risk/reward ratio is too large to compute"


@dataclass(frozen=True)
class UndefinedRisk:
    """
    The trade cannot be sized.

    Entry equals stop (zero risk per contract), or the prices are so far
    apart or so close that an amount overflows a float.
    """
    entry_price: float
    stop_loss_price: float
    message: str = ZERO_RISK


SizingOutcome = Union[SizingResult, UndefinedRisk, None]


def compute_sizing(request: TradeRequest, point_value: float) -> SizingOutcome:
    """
    Size a position against the account's risk budget.

    Args:
        request: Parsed trade parameters
        point_value: Dollar value of a one-point move per contract

    Returns:
        None if required fields are missing, UndefinedRisk if entry equals
        stop or an amount is not finite, otherwise a SizingResult
    """
    if not request.is_complete:
        return None

    entry = request.entry_price
    stop = request.stop_loss_price

    risk_per_point = abs(entry - stop) * point_value
    if risk_per_point == 0:
        logger.warning(f"Undefined risk: entry {entry} equals stop loss {stop}")
        return UndefinedRisk(entry_price=entry, stop_loss_price=stop)
    if not math.isfinite(risk_per_point):
        logger.warning(f"Undefined risk: entry {entry} and stop loss {stop} are too far apart")
        return UndefinedRisk(entry_price=entry, stop_loss_price=stop, message=RISK_OVERFLOW)

    max_risk_amount = request.account_balance * (request.max_risk_percentage / 100)

    raw_contracts = max_risk_amount / risk_per_point
    if not math.isfinite(raw_contracts):
        logger.warning(f"Undefined size: stop distance {abs(entry - stop)} is too small for the budget")
        return UndefinedRisk(entry_price=entry, stop_loss_price=stop, message=SIZE_OVERFLOW)

    # Floor, never round up; at least one contract is always recommended
    contracts = max(math.floor(raw_contracts), 1)
    actual_risk_amount = risk_per_point * contracts

    if contracts == 1 and actual_risk_amount > max_risk_amount:
        logger.warning(
            f"Too much risk: 1 contract risks ${actual_risk_amount:,.2f} "
            f"vs budget ${max_risk_amount:,.2f}"
        )
        return SizingResult(
            contracts=TOO_MUCH_RISK,
            risk_amount=round_money(actual_risk_amount),
            risk_reward_ratio=None,
            point_value=point_value,
            risk_per_point=risk_per_point,
            max_risk_amount=max_risk_amount,
            actual_risk_amount=actual_risk_amount,
        )

    ratio = None
    if request.take_profit_price is not None:
        reward = abs(request.take_profit_price - entry) * point_value * contracts
        ratio = reward / actual_risk_amount
        if not math.isfinite(ratio):
            logger.warning(f"Undefined ratio: take profit {request.take_profit_price} is too far from entry")
            return UndefinedRisk(entry_price=entry, stop_loss_price=stop, message=REWARD_OVERFLOW)
        ratio = round_money(ratio)

    logger.debug(
        f"Sized {request.instrument}{' micro' if request.is_micro else ''}: "
        f"{contracts} contracts, risk ${actual_risk_amount:,.2f}, rr={ratio}"
    )
    return SizingResult(
        contracts=contracts,
        risk_amount=round_money(actual_risk_amount),
        risk_reward_ratio=ratio,
        point_value=point_value,
        risk_per_point=risk_per_point,
        max_risk_amount=max_risk_amount,
        actual_risk_amount=actual_risk_amount,
    )
