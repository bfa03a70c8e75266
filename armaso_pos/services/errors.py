"""Domain errors shared by more than one service."""


class OrderNotFoundError(Exception):
    """Raised when an order id does not exist."""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")
