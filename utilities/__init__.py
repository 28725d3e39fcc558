"""
Shared utilities: application configuration and structured logging.
"""
