"""
Shared module package.

Contains cross-cutting concerns used across layers:
- Error translation and HTTP error handlers
- Logging configuration
"""
