"""
Environment configuration.

Values come from the process environment, optionally seeded from a
.env file in the working directory.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Supabase edge functions (remote product service)
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
PRODUCT_SERVICE_TIMEOUT = float(os.environ.get("PRODUCT_SERVICE_TIMEOUT", "10"))

# Upstash Redis (durable cart storage)
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

CART_TTL_SECONDS = int(os.environ.get("CART_TTL_SECONDS", "86400"))
DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "USD").upper()

STORAGE_REDIS = "redis"
STORAGE_MEMORY = "memory"


def redis_configured() -> bool:
    """True when both Upstash credentials are present."""
    return bool(UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN)


def get_cart_storage_backend() -> str:
    """
    Resolve which durable store backs carts.

    CART_STORAGE wins when set; otherwise Redis is used if configured,
    falling back to the in-process memory store.
    """
    backend = os.environ.get("CART_STORAGE", "").strip().lower()
    if backend in (STORAGE_REDIS, STORAGE_MEMORY):
        return backend
    return STORAGE_REDIS if redis_configured() else STORAGE_MEMORY
