"""Utility functions for sample project."""


def validate_email(email: str) -> bool:
    """Validate email format."""
    return "@" in email and "." in email.split("@")[1]


def format_name(first: str, last: str) -> str:
    """Format full name from first and last name."""
    return f"{first.capitalize()} {last.capitalize()}"


def calculate_total(items: list, tax_rate: float = 0.1) -> float:
    """Calculate total with tax."""
    subtotal = sum(items)
    tax = subtotal * tax_rate
    return subtotal + tax
