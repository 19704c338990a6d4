"""Endpoint handlers."""
