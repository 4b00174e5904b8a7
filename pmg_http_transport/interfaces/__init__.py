"""
Interfaces layer package.

Contains the inbound dispatch adapter and the Pydantic schemas that
validate transport arguments. No business logic belongs here.
"""
