"""
Tests for the calculator session.
"""

import json

import pytest

from risksizer.calculator import (
    EMPTY_PROMPT,
    FIELDS,
    IS_MICRO,
    MAX_RISK_PERCENTAGE,
    SELECTED_INDEX,
    PositionCalculator,
    format_result,
    result_to_dict,
)
from risksizer.core.errors import InvalidInputError, UnknownInstrumentError
from risksizer.core.instruments import NON_INDEX, InstrumentRegistry
from risksizer.core.sizing import TOO_MUCH_RISK, SizingResult, UndefinedRisk
from risksizer.utils.config import Config, RiskConfig, StorageConfig
from risksizer.utils.settings_store import JsonSettingsStore, MemorySettingsStore


@pytest.fixture
def store():
    return MemorySettingsStore()


@pytest.fixture
def calc(store):
    return PositionCalculator(InstrumentRegistry(), store)


class TestInitialState:
    """Field values when the calculator starts."""

    def test_defaults(self, calc):
        assert calc.fields == {
            "accountBalance": "",
            "maxRiskPercentage": "0.125",
            "selectedIndex": "ES",
            "isMicro": "false",
            "entry": "",
            "stopLoss": "",
            "takeProfit": "",
        }
        assert calc.result() is None

    def test_restores_saved_values(self):
        store = MemorySettingsStore({
            "accountBalance": "50000",
            "maxRiskPercentage": "1",
            "selectedIndex": "ES",
            "isMicro": "true",
            "entry": "5000",
            "stopLoss": "4990",
            "takeProfit": "5030",
        })

        calc = PositionCalculator(InstrumentRegistry(), store)
        result = calc.result()

        assert result.contracts == 10
        assert str(result.risk_reward_ratio) == "3.00"

    def test_restores_boolean_micro_flag(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"selectedIndex": "ES", "isMicro": True}))

        calc = PositionCalculator(InstrumentRegistry(), JsonSettingsStore(path))

        assert calc.fields[IS_MICRO] == "true"
        assert calc.request().is_micro == True

    def test_bad_saved_risk_falls_back(self):
        store = MemorySettingsStore({"maxRiskPercentage": "garbage"})

        calc = PositionCalculator(InstrumentRegistry(), store)

        assert calc.fields[MAX_RISK_PERCENTAGE] == "0.125"

    def test_saved_unknown_instrument_falls_back(self):
        store = MemorySettingsStore({"selectedIndex": "CL"})

        calc = PositionCalculator(InstrumentRegistry(), store, default_instrument="NQ")

        assert calc.fields[SELECTED_INDEX] == "NQ"

    def test_saved_non_index_clears_micro(self):
        store = MemorySettingsStore({"selectedIndex": NON_INDEX, "isMicro": "true"})

        calc = PositionCalculator(InstrumentRegistry(), store)

        assert calc.fields[IS_MICRO] == "false"
        assert calc.micro_enabled == False

    def test_unknown_default_instrument_is_fatal(self, store):
        with pytest.raises(UnknownInstrumentError):
            PositionCalculator(InstrumentRegistry(), store, default_instrument="CL")

    def test_custom_default_risk(self, store):
        calc = PositionCalculator(InstrumentRegistry(), store, risk=RiskConfig(default_risk_pct=0.5))

        assert calc.fields[MAX_RISK_PERCENTAGE] == "0.5"


class TestUpdate:
    """Field changes, persistence and recomputation."""

    def test_fill_form_step_by_step(self, calc):
        assert calc.update(accountBalance="10000") is None
        assert calc.update(entry="5000") is None

        result = calc.update(stopLoss="4995")

        assert result.contracts == TOO_MUCH_RISK
        assert str(result.risk_amount) == "250.00"

    def test_every_change_is_saved(self, calc, store):
        calc.update(accountBalance="10000", entry="100")

        saved = store.load()

        assert set(saved) == set(FIELDS)
        assert saved["accountBalance"] == "10000"
        assert saved["entry"] == "100"

    def test_non_index_scenario(self, calc):
        result = calc.update(
            accountBalance="10000",
            maxRiskPercentage="0.5",
            selectedIndex=NON_INDEX,
            entry="100",
            stopLoss="95",
        )

        assert result.contracts == 10
        assert str(result.risk_amount) == "50.00"
        assert result.risk_reward_ratio is None

    def test_invalid_change_not_applied(self, calc, store):
        calc.update(accountBalance="10000")

        with pytest.raises(InvalidInputError):
            calc.update(accountBalance="ten thousand")

        assert calc.fields["accountBalance"] == "10000"
        assert store.load()["accountBalance"] == "10000"

    def test_unknown_instrument_rejected(self, calc):
        with pytest.raises(UnknownInstrumentError):
            calc.select_instrument("CL")

        assert calc.fields[SELECTED_INDEX] == "ES"

    def test_unknown_field(self, calc):
        with pytest.raises(KeyError):
            calc.update(lotSize="2")

    def test_undefined_risk(self, calc):
        result = calc.update(accountBalance="10000", entry="100", stopLoss="100")

        assert isinstance(result, UndefinedRisk)

    @pytest.mark.parametrize("changes", [
        dict(accountBalance="10000", entry="1e307", stopLoss="1"),
        dict(accountBalance="1e308", maxRiskPercentage="5", selectedIndex=NON_INDEX,
             entry="1", stopLoss="1.0000000000000002"),
    ])
    def test_overflowing_amounts_are_undefined(self, calc, changes):
        result = calc.update(**changes)

        assert isinstance(result, UndefinedRisk)
        assert format_result(result) == result.message

    def test_clear_take_profit(self, calc):
        calc.update(accountBalance="50000", maxRiskPercentage="1", isMicro=True,
                    entry="5000", stopLoss="4990", takeProfit="5030")

        result = calc.update(takeProfit="")

        assert result.risk_reward_ratio is None


class TestMicroToggle:
    """Micro contracts are only available for index instruments."""

    def test_micro_changes_point_value(self, calc):
        calc.update(accountBalance="50000", maxRiskPercentage="1", entry="5000", stopLoss="4990")

        assert calc.set_micro(True).contracts == 10
        assert calc.set_micro(False).contracts == 1

    def test_selecting_non_index_turns_micro_off(self, calc):
        calc.set_micro(True)

        calc.select_instrument(NON_INDEX)

        assert calc.fields[IS_MICRO] == "false"
        assert calc.micro_enabled == False

    def test_micro_ignored_for_non_index(self, calc, store):
        calc.select_instrument(NON_INDEX)

        calc.set_micro(True)

        assert calc.fields[IS_MICRO] == "false"
        assert store.load()[IS_MICRO] == "false"

    def test_micro_stays_off_after_switching_back(self, calc):
        calc.set_micro(True)
        calc.select_instrument(NON_INDEX)

        calc.select_instrument("NQ")

        assert calc.fields[IS_MICRO] == "false"


class TestFromConfig:
    """Building a calculator from Config."""

    def test_json_store(self, tmp_path):
        path = tmp_path / "settings.json"
        config = Config(storage=StorageConfig(settings_path=str(path)))

        calc = PositionCalculator.from_config(config)
        calc.update(accountBalance="25000")

        assert isinstance(calc.store, JsonSettingsStore)
        assert json.loads(path.read_text())["accountBalance"] == "25000"

        reopened = PositionCalculator.from_config(config)
        assert reopened.fields["accountBalance"] == "25000"

    def test_persistence_disabled(self, tmp_path):
        config = Config(storage=StorageConfig(settings_path=str(tmp_path / "s.json"), persist=False))

        calc = PositionCalculator.from_config(config)
        calc.update(accountBalance="25000")

        assert isinstance(calc.store, MemorySettingsStore)
        assert not (tmp_path / "s.json").exists()


class TestFormatting:
    """Rendering of results."""

    def test_risk_label(self, calc):
        assert calc.risk_label() == "Max Risk (%): 0.125%"

        calc.update(maxRiskPercentage="2.5")

        assert calc.risk_label() == "Max Risk (%): 2.500%"

    def test_empty(self):
        assert format_result(None) == EMPTY_PROMPT
        assert result_to_dict(None) is None

    def test_undefined_risk(self):
        outcome = UndefinedRisk(entry_price=100.0, stop_loss_price=100.0)

        assert format_result(outcome) == outcome.message
        assert result_to_dict(outcome) == {"error": outcome.message}

    def test_with_ratio(self, calc):
        outcome = calc.update(accountBalance="50000", maxRiskPercentage="1", isMicro=True,
                              entry="5000", stopLoss="4990", takeProfit="5030")

        assert format_result(outcome) == (
            "Max Contracts: 10\n"
            "Risk Amount: $500.00\n"
            "Risk/Reward Ratio: 3.00"
        )
        assert result_to_dict(outcome) == {"maxContracts": 10, "riskAmount": "500.00", "rr": "3.00"}

    def test_too_much_risk(self, calc):
        outcome = calc.update(accountBalance="10000", entry="5000", stopLoss="4995")

        assert isinstance(outcome, SizingResult)
        assert format_result(outcome) == "Max Contracts: Too much risk\nRisk Amount: $250.00"
        assert result_to_dict(outcome)["rr"] is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
