"""Shared adapter helpers."""
