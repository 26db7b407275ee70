# inkan_core/constants.py

# Ed25519 sizes in bytes
SEED_SIZE = 32
PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64

# signed document digest (SHA-256)
DIGEST_SIZE = 32

# password-based encryption of private keys
PBKDF2_ITERATIONS = 100_000
DERIVED_KEY_SIZE = 32
SALT_SIZE = 32
NONCE_SIZE = 12

DEFAULT_EXPIRING_SOON_DAYS = 30
DEFAULT_WORKERS = 4
DEFAULT_STORAGE_PATH = "keys.json"
