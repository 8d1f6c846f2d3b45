"""
Utility Functions for RiskSizer
===============================
Common helper functions.
"""

import json
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Dict, Optional

from loguru import logger


CENT = Decimal("0.01")


def round_money(value: float) -> Decimal:
    """Round to 2 decimal places, half up, from the float's shortest repr."""
    return Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP)


def format_price(price, decimals: int = 2) -> str:
    """Format price for display."""
    return f"${price:,.{decimals}f}"


def format_risk_pct(value: float) -> str:
    """Format a risk percentage the way the risk slider label shows it."""
    return f"{value:.3f}%"


def is_on_step(value: float, step: float, origin: float = 0.0) -> bool:
    """True if value sits on the grid origin + k * step."""
    steps = (value - origin) / step
    return abs(steps - round(steps)) < 1e-9


def load_json(path) -> Optional[Dict]:
    """Load JSON file."""
    try:
        with open(path, "r") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading JSON {path}: {e}")
        return None


def save_json(data: Dict, path) -> bool:
    """Save data to JSON file."""
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2, default=str)
        return True
    except OSError as e:
        logger.error(f"Error saving JSON {path}: {e}")
        return False
