"""
In-memory book catalog.

This package holds the core of the Bookshelf API:
- Book records and listing filters
- A thread-safe record store with ordered pagination
- The application service that validates and stamps records
"""
