"""Utilities - structured logging."""
