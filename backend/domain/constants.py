"""
Domain constants used across services/routers.
"""

DEFAULT_CURRENCY = "INR"

# Minor units per major unit (paise per rupee)
MINOR_UNITS_PER_MAJOR = 100

# Gateway error `reason` for a checkout the user abandoned
PAYMENT_CANCELLED_REASON = "payment_cancelled"

RECEIPT_PREFIX = "receipt_"
