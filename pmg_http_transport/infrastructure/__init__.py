"""
Infrastructure package.

Adapters over third-party runtimes: the httpx outbound client and the
uvicorn server lifecycle.
"""
