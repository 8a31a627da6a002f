# utils/formatting.py
from datetime import date
from decimal import Decimal


def peso(amount) -> str:
     """₱20,000.00"""
     return f"₱{Decimal(amount or 0):,.2f}"


def long_date(value: date) -> str:
     """January 2, 2025"""
     return f"{value:%B} {value.day}, {value.year}"


def month_label(value: date) -> str:
     """January 2025"""
     return f"{value:%B %Y}"
