"""Adapters – concrete outbox stores and unit-of-work performers."""
