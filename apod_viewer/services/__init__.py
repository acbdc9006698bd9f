"""Pure services used by the fetch pipeline."""

from .response_classifier import (
    CREDIT_LABEL,
    ResponseClassifier,
    classify,
    format_credit_line,
    format_long_date,
    normalize_credit,
)

__all__ = [
    "CREDIT_LABEL",
    "ResponseClassifier",
    "classify",
    "format_credit_line",
    "format_long_date",
    "normalize_credit",
]
