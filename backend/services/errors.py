"""
Domain exceptions raised by the store and the order/payment pipeline.
Routers translate these into HTTP responses.
"""


class KaamDhenuError(Exception):
    """Base class for business-rule failures scoped to one request"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(KaamDhenuError):
    def __init__(self, entity: str, identifier):
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class OrderItemNotFound(KaamDhenuError):
    def __init__(self, product: str, district: str, unique_number: int):
        super().__init__(
            f"Product {product} not found in {district} with unique number {unique_number}"
        )
        self.product = product
        self.district = district
        self.unique_number = unique_number


class InsufficientStock(KaamDhenuError):
    def __init__(self, product: str, district: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product} in {district}. "
            f"Available: {available}, Requested: {requested}"
        )
        self.product = product
        self.district = district
        self.requested = requested
        self.available = available


class EmptyOrder(KaamDhenuError):
    def __init__(self):
        super().__init__(
            "Order details contain no item lines of the form "
            "'<product> <quantity> <district> <addedBy> <uniqueNumber>'"
        )


class InvalidStatusTransition(KaamDhenuError):
    def __init__(self, field: str, current: str, requested: str):
        super().__init__(f"Cannot change {field} from {current} to {requested}")
        self.field = field
        self.current = current
        self.requested = requested


class RoleAssignmentError(KaamDhenuError):
    pass
