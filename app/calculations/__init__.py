"""
Cash Flow & ROI Calculation Engine

Pure functions for bill recurrence, cash-flow aggregation, mortgage
payments and acquisition ROI. All money math is done in Decimal.
"""

from app.calculations import money, recurrence, aggregation, mortgage, roi

__all__ = ["money", "recurrence", "aggregation", "mortgage", "roi"]
