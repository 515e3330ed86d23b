"""Discounted cash flow primitives.

Rates are expressed in percent (``10.0`` means 10 %), matching the
financial assumptions entered by users.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)

IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 1e-4
IRR_INITIAL_GUESS = 0.1


def npv(cash_flows: Sequence[float], rate_pct: float) -> float:
    """Net present value of ``cash_flows`` where index 0 is undiscounted."""
    factor = 1 + rate_pct / 100
    return sum(cf / factor**period for period, cf in enumerate(cash_flows))


def irr(cash_flows: Sequence[float], guess: float = IRR_INITIAL_GUESS) -> float:
    """Internal rate of return in percent per period, via Newton-Raphson.

    Returns 0.0 when the iteration does not converge within
    ``IRR_MAX_ITERATIONS`` steps, hits a flat derivative, or diverges
    past the float range (cash flows with no sign change).
    """
    rate = guess
    for _ in range(IRR_MAX_ITERATIONS):
        value = 0.0
        derivative = 0.0
        try:
            for period, cf in enumerate(cash_flows):
                value += cf / (1 + rate) ** period
                derivative += (-period * cf) / (1 + rate) ** (period + 1)
        except (OverflowError, ZeroDivisionError):
            logger.debug("IRR diverged at rate %.6g; no solution", rate)
            return 0.0

        if derivative == 0:
            logger.debug("IRR derivative vanished at rate %.6f; no solution", rate)
            return 0.0

        new_rate = rate - value / derivative
        if abs(new_rate - rate) < IRR_TOLERANCE:
            return new_rate * 100
        rate = new_rate

    logger.debug("IRR did not converge after %d iterations", IRR_MAX_ITERATIONS)
    return 0.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)
