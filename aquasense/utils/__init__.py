# aquasense/utils/__init__.py
"""
Utility package shared by the API and the aggregation runtime.
"""

from .datetime_utils import DateTimeUtils

__all__ = ['DateTimeUtils']
