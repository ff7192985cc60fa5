"""
Shared utilities: structured logging setup and request log context.
"""
