"""
Pydantic schemas package.

This package contains all Pydantic schemas for request/response
validation and serialization.
"""
