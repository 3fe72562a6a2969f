"""Application-wide constants and configuration defaults.

Centralizes magic numbers so pricing, validation and network policy
are changed in one place.
"""

# ============== TIME CONSTANTS (seconds) ==============
SECONDS_PER_MINUTE = 60

# ============== DELIVERY ==============
DELIVERY_FEE = 200  # fixed fee below the threshold
FREE_DELIVERY_FROM = 2000  # subtotal at which delivery becomes free

# ============== CHECKOUT VALIDATION ==============
MIN_NAME_LENGTH = 2
MIN_PHONE_LENGTH = 6
MIN_ADDRESS_LENGTH = 5

# ============== CATALOG ==============
CATALOG_CACHE_TTL_SECONDS = 10 * SECONDS_PER_MINUTE
CATALOG_CACHE_KEY = "farm_products_v1"
ALL_CATEGORIES = "Все"

# ============== CART ==============
CART_STORAGE_KEY = "farm_cart_v1"
CART_SNAPSHOT_TTL_SECONDS = 30 * 24 * 3600

# ============== API TIMEOUTS ==============
ORDER_TIMEOUT_SECONDS = 15
CATALOG_TIMEOUT_SECONDS = 15

# ============== CURRENCY ==============
CURRENCY_SIGN = "₽"
