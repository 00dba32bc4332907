"""
Stock Kernel - inventory stock ledger

An append-only movement ledger for article stock with:
- A derived running balance per article, kept reconciled on insert, edit
  and delete of ledger entries
- Per-article row locking for read-modify-write of balances
- Physical count sessions (toma fisica) that snapshot balances and
  collect operator recounts
"""

__version__ = "0.1.0"
