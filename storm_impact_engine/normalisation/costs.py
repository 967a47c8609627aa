"""
Damage cost normalisation.
Converts (amount, unit code) pairs from the storm database into dollars.
"""

from typing import Optional

from ..config.cost_config import LETTER_MULTIPLIERS, DIGIT_CODES, DEFAULT_MULTIPLIER


def multiplier(code: Optional[str]) -> float:
    """
    Map a unit code to its dollar multiplier.

    Letter codes are case-insensitive; digit codes '0'-'8' scale by 10**digit.
    Anything else, including blank, '9' and symbols, returns DEFAULT_MULTIPLIER.

    Example:
        >>> multiplier("k")
        1000.0
        >>> multiplier("9")
        1.0
    """
    if not code:
        return DEFAULT_MULTIPLIER

    symbol = code.strip()
    if len(symbol) != 1:
        return DEFAULT_MULTIPLIER

    if symbol in DIGIT_CODES:
        return float(10 ** int(symbol))

    return LETTER_MULTIPLIERS.get(symbol.upper(), DEFAULT_MULTIPLIER)


def cost(amount: float, code: Optional[str]) -> float:
    """
    Dollar cost of a damage amount.

    Args:
        amount: Non-negative damage magnitude
        code: Unit code qualifying the amount

    Returns:
        amount * multiplier(code)
    """
    if not amount:
        return 0.0
    return float(amount) * multiplier(code)
