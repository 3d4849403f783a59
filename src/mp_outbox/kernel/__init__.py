"""Kernel – events, errors, time and identifiers (no I/O)."""
