"""
Trade query and portfolio analytics engine.

Filters, pages, enriches and aggregates disclosed congressional and
corporate-insider securities trades.
"""

__version__ = "1.0.0"
