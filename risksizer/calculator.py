"""
Calculator Session
==================
The caller around the sizing engine: holds the raw form fields, keeps them
in a settings store, and recomputes the sizing result after every change.

Usage:
    config = load_config()
    calc = PositionCalculator.from_config(config)
    calc.update(accountBalance="50000", maxRiskPercentage="1",
                selectedIndex="ES", isMicro="true",
                entry="5000", stopLoss="4990", takeProfit="5030")
    result = calc.result()
"""

from typing import Dict, Optional

from loguru import logger

from risksizer.core.inputs import parse_flag, parse_risk_percentage, parse_trade_request
from risksizer.core.instruments import InstrumentRegistry
from risksizer.core.sizing import SizingOutcome, TradeRequest, UndefinedRisk, compute_sizing
from risksizer.utils.config import Config, RiskConfig
from risksizer.utils.settings_store import JsonSettingsStore, MemorySettingsStore, SettingsStore
from risksizer.utils.utils import format_price, format_risk_pct


# Persisted field keys
ACCOUNT_BALANCE = "accountBalance"
MAX_RISK_PERCENTAGE = "maxRiskPercentage"
SELECTED_INDEX = "selectedIndex"
IS_MICRO = "isMicro"
ENTRY = "entry"
STOP_LOSS = "stopLoss"
TAKE_PROFIT = "takeProfit"

FIELDS = (ACCOUNT_BALANCE, MAX_RISK_PERCENTAGE, SELECTED_INDEX, IS_MICRO, ENTRY, STOP_LOSS, TAKE_PROFIT)

EMPTY_PROMPT = "Please fill in the required fields to see results."


class PositionCalculator:
    """
    Form state plus persistence around compute_sizing().

    Field values are kept exactly as typed. Selecting the non-index
    instrument switches the micro toggle off and keeps it off.
    """

    def __init__(
        self,
        registry: InstrumentRegistry,
        store: Optional[SettingsStore] = None,
        risk: Optional[RiskConfig] = None,
        default_instrument: str = "ES",
    ):
        self.registry = registry
        self.store = store or MemorySettingsStore()
        self.risk = risk or RiskConfig()

        # Unknown instruments stop the calculator from starting
        registry.validate_instrument(default_instrument)

        saved = self.store.load()
        instrument = saved.get(SELECTED_INDEX) or default_instrument
        if not registry.is_known(instrument):
            logger.warning(f"Saved instrument {instrument!r} is not configured, using {default_instrument}")
            instrument = default_instrument

        self.fields: Dict[str, str] = {
            ACCOUNT_BALANCE: saved.get(ACCOUNT_BALANCE, ""),
            MAX_RISK_PERCENTAGE: self._initial_risk(saved.get(MAX_RISK_PERCENTAGE)),
            SELECTED_INDEX: instrument,
            IS_MICRO: "true" if parse_flag(saved.get(IS_MICRO)) else "false",
            ENTRY: saved.get(ENTRY, ""),
            STOP_LOSS: saved.get(STOP_LOSS, ""),
            TAKE_PROFIT: saved.get(TAKE_PROFIT, ""),
        }
        if not registry.supports_micro(instrument):
            self.fields[IS_MICRO] = "false"

        logger.debug(f"Calculator started with {len(saved)} saved field(s) from {self.store!r}")

    @classmethod
    def from_config(cls, config: Config, store: Optional[SettingsStore] = None) -> "PositionCalculator":
        if store is None:
            if config.storage.persist:
                store = JsonSettingsStore(config.storage.settings_path)
            else:
                store = MemorySettingsStore()
        return cls(
            registry=config.build_registry(),
            store=store,
            risk=config.risk,
            default_instrument=config.instruments.default_instrument,
        )

    def _initial_risk(self, saved: Optional[str]) -> str:
        # Stored risk that no longer parses falls back to the default
        try:
            return str(parse_risk_percentage(saved, **self.risk.limits()))
        except ValueError:
            logger.warning(f"Discarding saved risk percentage {saved!r}")
            return str(self.risk.default_risk_pct)

    # =========================================================================
    # Field updates
    # =========================================================================

    def update(self, **changes) -> SizingOutcome:
        """
        Apply field changes, persist all fields, and recompute.

        Keys are the persisted field names (accountBalance, entry, ...).
        Raises InvalidInputError or UnknownInstrumentError; rejected changes
        are not applied.
        """
        unknown = set(changes) - set(FIELDS)
        if unknown:
            raise KeyError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        fields = dict(self.fields)
        for key, value in changes.items():
            if key == IS_MICRO:
                value = "true" if parse_flag(value) else "false"
            fields[key] = "" if value is None else str(value)

        instrument = self.registry.validate_instrument(fields[SELECTED_INDEX])
        if not self.registry.supports_micro(instrument):
            fields[IS_MICRO] = "false"

        request = self._parse(fields)

        self.fields = fields
        self.store.save(self.fields)
        return self._compute(request)

    def select_instrument(self, instrument: str) -> SizingOutcome:
        return self.update(**{SELECTED_INDEX: instrument})

    def set_micro(self, is_micro: bool) -> SizingOutcome:
        """Toggle micro contracts; a no-op while the non-index instrument is selected."""
        if is_micro and not self.micro_enabled:
            logger.debug("Micro toggle ignored for non-index instrument")
            return self.result()
        return self.update(**{IS_MICRO: is_micro})

    @property
    def micro_enabled(self) -> bool:
        return self.registry.supports_micro(self.fields[SELECTED_INDEX])

    # =========================================================================
    # Results
    # =========================================================================

    def request(self) -> TradeRequest:
        return self._parse(self.fields)

    def result(self) -> SizingOutcome:
        return self._compute(self.request())

    def _parse(self, fields: Dict[str, str]) -> TradeRequest:
        return parse_trade_request(
            self.registry,
            account_balance=fields[ACCOUNT_BALANCE],
            max_risk_percentage=fields[MAX_RISK_PERCENTAGE],
            instrument=fields[SELECTED_INDEX],
            is_micro=fields[IS_MICRO],
            entry=fields[ENTRY],
            stop_loss=fields[STOP_LOSS],
            take_profit=fields[TAKE_PROFIT],
            **self.risk.limits(),
        )

    def _compute(self, request: TradeRequest) -> SizingOutcome:
        point_value = self.registry.point_value(request.instrument, request.is_micro)
        return compute_sizing(request, point_value)

    def risk_label(self) -> str:
        value = parse_risk_percentage(self.fields[MAX_RISK_PERCENTAGE], **self.risk.limits())
        return f"Max Risk (%): {format_risk_pct(value)}"


def format_result(outcome: SizingOutcome) -> str:
    """Render a sizing outcome as the lines shown under Calculation Results."""
    if outcome is None:
        return EMPTY_PROMPT
    if isinstance(outcome, UndefinedRisk):
        return outcome.message

    lines = [
        f"Max Contracts: {outcome.contracts}",
        f"Risk Amount: {format_price(outcome.risk_amount)}",
    ]
    if outcome.risk_reward_ratio is not None:
        lines.append(f"Risk/Reward Ratio: {outcome.risk_reward_ratio}")
    return "\n".join(lines)


def result_to_dict(outcome: SizingOutcome) -> Optional[dict]:
    """Plain-data view of an outcome, None when the form is incomplete."""
    if outcome is None:
        return None
    if isinstance(outcome, UndefinedRisk):
        return {"error": outcome.message}
    return {
        "maxContracts": outcome.contracts,
        "riskAmount": str(outcome.risk_amount),
        "rr": None if outcome.risk_reward_ratio is None else str(outcome.risk_reward_ratio),
    }
