"""Domain value objects."""

from app.domain.value_objects.money import Money, from_cents, quantize, to_cents, to_decimal

__all__ = [
    "Money",
    "from_cents",
    "quantize",
    "to_cents",
    "to_decimal",
]
