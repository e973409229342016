"""
Teller - interactive account ledger with per-account transaction logs
"""

__version__ = "1.0.0"
