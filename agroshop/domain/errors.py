# agroshop/domain/errors.py


class ShopError(Exception):
    """Bazowy blad domeny sklepu."""

    message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(ShopError):
    message = "Invalid input"


class NotFound(ShopError):
    message = "Not found"


class OutOfStock(ShopError):
    message = "Out of stock"


class ItemNotInCart(ShopError):
    message = "Item not in cart"


class ProductNotInCart(ShopError):
    message = "Product not in cart"


class EmptyCart(ShopError):
    message = "Cart is empty"


class InsufficientStock(ShopError):
    def __init__(self, product_id: str):
        super().__init__(f"Not enough stock for product {product_id}")
        self.product_id = product_id


class TransactionConflict(ShopError):
    message = "Konflikt wspolbieznosci - dokument zostal zmodyfikowany przez inna operacje"


class TransactionTooLarge(ShopError):
    def __init__(self, touched: int, limit: int):
        super().__init__(f"Transaction touches {touched} documents, limit is {limit}")
        self.touched = touched
        self.limit = limit
