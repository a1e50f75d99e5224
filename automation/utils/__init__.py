"""
Utility functions and helpers.
"""
from .date_helpers import parse_date_string

__all__ = ['parse_date_string']
