"""Ledger Consistency Tools: consistency checks and safe fixes for accounting data.

The engine validates chart-of-accounts, journal, inventory, expense and
purchasing records of a multi-tenant accounting store against referential and
double-entry invariants, and applies audited fixes for the few issues that
have exactly one correct answer.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
