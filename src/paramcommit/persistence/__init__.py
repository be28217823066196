"""Persistence: append-only verification event log."""
