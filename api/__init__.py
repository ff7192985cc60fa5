"""
FastAPI RESTful API for the Bookshelf service.

This module provides a REST API for:
- Book create, read, update, delete and paginated listing
- Bearer token issuance and verification
"""
