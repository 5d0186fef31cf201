"""Notification delivery adapters."""
