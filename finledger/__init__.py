"""
finledger - Source Package

A personal/shared finance ledger core: account sessions, an owned
transaction ledger persisted to a key-value store, and dashboard
aggregations (monthly, daily, by category).

DESIGN PRINCIPLES:
1. One direction of data flow: session -> ledger -> analytics
2. Durable copy and in-memory view never disagree after a call returns
3. Failures reach the caller as typed results, not crashes
4. Every significant action is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "finledger Team"
