"""
Error taxonomy for the storefront. Each error carries the HTTP status it is
reported with; main.py turns them into JSON responses.
"""

from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    status_code = 500
    message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class InvalidRequest(StorefrontError):
    status_code = 400
    message = "Invalid request"


class ProductNotFound(StorefrontError):
    status_code = 400

    def __init__(self, product_ref: str):
        self.product_ref = product_ref
        super().__init__(f"Product not found: {product_ref}")


class Unauthorized(StorefrontError):
    status_code = 401
    message = "Not authorized"


class SignatureMismatch(StorefrontError):
    status_code = 400
    message = "Payment verification failed"


class NotFound(StorefrontError):
    status_code = 404
    message = "Not found"


class ServiceUnavailable(StorefrontError):
    status_code = 503
    message = "Service unavailable"


class Internal(StorefrontError):
    status_code = 500
    message = "Internal server error"
