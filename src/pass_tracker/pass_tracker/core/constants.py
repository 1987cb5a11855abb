"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

PBKDF2_HASH_NAME = "sha256"
PBKDF2_ITERATIONS = 150_000
PBKDF2_DIGEST_BYTES = 32
SALT_BYTES = 16

MIN_PASSWORD_LENGTH = 6

IDENTITY_STORAGE_KEY = "pass_tracker_email"
DEFAULT_SESSION_DAYS = 7

# Read/compare-and-set cycles in BalanceLedger.adjust before giving up.
BALANCE_WRITE_ATTEMPTS = 3
