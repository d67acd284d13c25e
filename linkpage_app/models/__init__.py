"""
Database models for the link page service.

Pages own their blocks; analytics events and shortlinks reference pages and
blocks by id only.
"""

from .page import Page, Block
from .analytics import AnalyticsEvent, Shortlink

__all__ = ["Page", "Block", "AnalyticsEvent", "Shortlink"]
