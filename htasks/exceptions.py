"""
Custom exceptions for the HTasks backend.
All of them are local, recoverable conditions surfaced to the caller.
"""


class HTasksException(Exception):
    """Base exception for HTasks application"""
    pass


class InvalidArgumentException(HTasksException):
    """Raised when an argument fails validation"""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid value for {field}: {message}")


class InsufficientBalanceException(HTasksException):
    """Raised when a prompt is consumed with no daily or purchased balance left"""
    def __init__(self, daily_remaining: int = 0, purchased_balance: int = 0):
        self.daily_remaining = daily_remaining
        self.purchased_balance = purchased_balance
        super().__init__(
            "No prompts remaining: daily quota and purchased credits are exhausted"
        )


class CategoryNotFoundException(HTasksException):
    """Raised when a category is not found"""
    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category with ID {category_id} not found")


class UnknownProductException(InvalidArgumentException):
    """Raised when a purchase references a product that grants no credits"""
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("product_id", f"unknown product '{product_id}'")
