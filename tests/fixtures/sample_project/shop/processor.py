"""Business logic processor."""

from typing import List, Optional

from . import utils
from .models import Order, User
from .utils import validate_email


class UserProcessor:
    """Process user-related operations."""

    def __init__(self):
        self.users: List[User] = []

    def create_user(self, email: str, first_name: str, last_name: str) -> Optional[User]:
        if not validate_email(email):
            return None

        user_id = len(self.users) + 1
        user = User(
            id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name
        )
        self.users.append(user)
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def has_user(self, user_id: int) -> bool:
        return self.get_user(user_id) is not None


class OrderProcessor:
    """Process order-related operations."""

    def __init__(self, user_processor: UserProcessor):
        self.user_processor = user_processor
        self.orders: List[Order] = []

    def create_order(self, user_id: int, items: List[float]) -> Optional[Order]:
        user = self.user_processor.get_user(user_id)
        if not user or not user.is_active:
            return None

        order = Order(id=len(self.orders) + 1, user_id=user_id, items=items)
        self.orders.append(order)
        return order

    def calculate_order_total(self, order_id: int, tax_rate: float = 0.1) -> Optional[float]:
        for order in self.orders:
            if order.id == order_id:
                return utils.calculate_total(order.items, tax_rate)
        return None
