"""Dashboard routes."""

from .billing_review import billing_review_bp

__all__ = [
    "billing_review_bp",
]
