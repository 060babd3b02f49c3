"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger models used by ``obligations``.
"""

from .ledger import Base, ObObligation

__all__ = [
    "Base",
    "ObObligation",
]
