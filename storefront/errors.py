"""
Common Error Constants

Centralized error messages shared by the cart store, the product
service client and the HTTP layer.
"""

# Cart errors
ERROR_INVALID_PRODUCT = "Product is missing a valid id or price"
ERROR_INVALID_QUANTITY = "Quantity must be a positive integer"
ERROR_CART_SESSION_REQUIRED = "X-Cart-Session header is required"

# Product service errors
ERROR_PRODUCT_NOT_FOUND = "Product not found"
ERROR_PRODUCT_SERVICE = "Product service unavailable"
ERROR_PRODUCT_SERVICE_NOT_CONFIGURED = "SUPABASE_URL and SUPABASE_ANON_KEY must be set"

# Storage errors
ERROR_REDIS_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"
