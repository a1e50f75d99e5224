"""
Date formatting helpers for the dashboard filters.
"""
from datetime import datetime


def parse_date_string(date_str: str, from_format: str, to_format: str) -> str:
    """
    Convert date from one format to another.

    Args:
        date_str: Date string to convert
        from_format: Current date format
        to_format: Desired date format

    Returns:
        str: Reformatted date string or original string if parsing fails
    """
    try:
        date_obj = datetime.strptime(date_str, from_format)
        return date_obj.strftime(to_format)
    except (TypeError, ValueError):
        return date_str
