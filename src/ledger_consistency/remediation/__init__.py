"""Automatic remediation of mechanically unambiguous issues.

Public API:
    RemediationEngine: Runs the fixers and reports one FixResult per fixer
    FIXABLE_CHECKS: Keys of every check with an automatic fix
"""

from __future__ import annotations

from .engine import RemediationEngine
from .fixers import FIXABLE_CHECKS, AccountTypeFixer, StockLevelFixer, build_fixers

__all__ = [
    "FIXABLE_CHECKS",
    "AccountTypeFixer",
    "RemediationEngine",
    "StockLevelFixer",
    "build_fixers",
]
