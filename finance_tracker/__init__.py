"""
Finance Tracker Ledger Engine

Personal-finance record keeping with derived balances, budget spending
windows and goal allocations, all computed with Decimal precision.
"""

__version__ = "1.0.0"
