"""Configuration - settings loader and logging redaction."""
