"""
Shared accounts API.

This package provides a FastAPI application where authenticated users
append, list, filter and retag contact records kept in one relational
table. Identity comes from Firebase ID tokens.
"""
