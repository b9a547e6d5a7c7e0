"""Shared test data."""

from datetime import date

PLAN_START = date(2025, 1, 1)
PLAN_END = date(2025, 3, 31)
IN_WINDOW = date(2025, 2, 10)
OUT_OF_WINDOW = date(2025, 5, 1)


def amounts(qurt=0, toys=0, milchofka=0):
    """Category amounts in the default category set."""
    return {"qurt": qurt, "toys": toys, "milchofka": milchofka}
