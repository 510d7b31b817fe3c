"""Shared utilities used across meshctl."""
