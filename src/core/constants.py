"""Core application constants."""

from decimal import Decimal

MILLISECONDS_PER_SECOND = 1000

REDACTED = "[REDACTED]"

# Percentages are stored with two decimal places and bounded to [0, 100]
PERCENT_SCALE = Decimal(100)
MIN_PERCENTAGE = Decimal(0)
MAX_PERCENTAGE = Decimal(100)

# Goal balances are stored as Numeric(20, 6)
AMOUNT_QUANTUM = Decimal("0.000001")
MAX_PAYMENT_AMOUNT = Decimal("1e14")
