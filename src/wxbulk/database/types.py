"""Shared types for the database layer."""

Params = tuple | list | dict
