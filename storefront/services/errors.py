"""
Business error kinds raised by the cart, checkout and order services.

Every error here is an expected, user-recoverable condition. The errors
blueprint renders them through the standard error envelope; anything that is
not a ``StorefrontError`` is treated as an unexpected failure.
"""


class StorefrontError(Exception):
    kind = "error"
    status = 400
    default_message = "Request could not be processed"

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = {k: v for k, v in extra.items() if v is not None}
        super().__init__(self.message)


class NotFound(StorefrontError):
    kind = "not_found"
    status = 404
    default_message = "Not found"


class ProductUnavailable(NotFound):
    kind = "product_unavailable"
    default_message = "Product is not available"


class Forbidden(StorefrontError):
    kind = "forbidden"
    status = 403
    default_message = "You do not have access to this cart"


class OutOfStock(StorefrontError):
    kind = "out_of_stock"
    status = 422
    default_message = "Product is out of stock"

    def __init__(self, message=None, *, product_id=None, product_name=None):
        super().__init__(message, product_id=product_id, product_name=product_name, left=0)


class InsufficientStock(StorefrontError):
    kind = "insufficient_stock"
    status = 422

    def __init__(self, message=None, *, left, product_id=None, product_name=None):
        self.left = left
        if message is None:
            message = f"Only {left} left in stock"
        super().__init__(message, product_id=product_id, product_name=product_name, left=left)


class EmptyCart(StorefrontError):
    kind = "empty_cart"
    status = 422
    default_message = "Cart is empty"


class ProductGone(StorefrontError):
    kind = "product_gone"
    status = 404
    default_message = "One of the products no longer exists in the catalog"


class UnknownDeliveryMethod(StorefrontError):
    kind = "unknown_delivery_method"
    status = 422

    def __init__(self, method):
        super().__init__(f"Unknown delivery method: {method}", field="delivery_method")


class UnknownPaymentMethod(StorefrontError):
    kind = "unknown_payment_method"
    status = 422

    def __init__(self, method):
        super().__init__(f"Unknown payment method: {method}", field="payment_method")


class ValidationFailed(StorefrontError):
    kind = "validation_failed"
    status = 422
    default_message = "Invalid request"


class InvalidTransition(StorefrontError):
    kind = "invalid_transition"
    status = 422

    def __init__(self, current, new):
        super().__init__(
            f"Cannot move order from {current} to {new}",
            from_status=current,
            to_status=new,
        )


__all__ = [
    "StorefrontError",
    "NotFound",
    "ProductUnavailable",
    "Forbidden",
    "OutOfStock",
    "InsufficientStock",
    "EmptyCart",
    "ProductGone",
    "UnknownDeliveryMethod",
    "UnknownPaymentMethod",
    "ValidationFailed",
    "InvalidTransition",
]
