"""
Damage unit-code configuration.
Maps the one-character exponent codes of the storm database to dollar multipliers.
"""

# Letter codes (matched case-insensitively)
LETTER_MULTIPLIERS = {
    "B": 1e9,  # billions
    "M": 1e6,  # millions
    "K": 1e3,  # thousands
    "H": 1e2,  # hundreds
}

# Digit codes scale by 10**digit. '9' is not part of the authoritative table
# and falls through to DEFAULT_MULTIPLIER.
DIGIT_CODES = "012345678"

# Blank, '+', '-', '?', '9' and anything else: amount is already in dollars
DEFAULT_MULTIPLIER = 1.0
