"""Data models for sample project."""

from dataclasses import dataclass
from typing import List

from .utils import format_name


@dataclass
class User:
    """User data model."""
    id: int
    email: str
    first_name: str
    last_name: str
    is_active: bool = True

    def full_name(self) -> str:
        """Get user's full name."""
        return format_name(self.first_name, self.last_name)


@dataclass
class Order:
    """Order data model."""
    id: int
    user_id: int
    items: List[float]
    status: str = "pending"

    def total(self) -> float:
        """Calculate order total."""
        return sum(self.items)
