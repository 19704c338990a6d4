"""Upstream gateway, response normalization and history storage."""
