"""Shared error types and Pydantic models."""
