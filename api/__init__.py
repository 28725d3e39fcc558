"""
FastAPI REST API for the Books service.

This package provides:
- CRUD endpoints for books under /api/books
- A document store layer backed by MongoDB
- Store settings from the environment or a secret vault
"""

__version__ = "1.0.0"
