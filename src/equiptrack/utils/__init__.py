"""Utility functions for equiptrack."""

from equiptrack.utils.date_parser import parse_date, parse_datetime, utcnow

__all__ = ["parse_date", "parse_datetime", "utcnow"]
