"""Utility functions package."""

from .helpers import clean_text, clinic_today, parse_appointment_date, utc_now

__all__ = ["clean_text", "clinic_today", "parse_appointment_date", "utc_now"]
