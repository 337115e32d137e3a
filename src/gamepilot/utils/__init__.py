"""
Shared utilities: configuration, logging, errors, validation and time helpers
"""
