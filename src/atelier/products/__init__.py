"""Products and their skill-completion state."""

from atelier.products.product import DecodeError, Product, skill_name

__all__ = [
    "DecodeError",
    "Product",
    "skill_name",
]
