"""
Shared error handling package.

Centralizes error-to-HTTP mapping in both directions so that errors
raised by listeners and errors received by callers agree on status codes.
"""
