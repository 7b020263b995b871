"""Persistence, ledger and edit sessions."""
