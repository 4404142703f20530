"""Local form validation."""

from storefront.validation.validator import TransactionValidator, parse_amount

__all__ = ["TransactionValidator", "parse_amount"]
