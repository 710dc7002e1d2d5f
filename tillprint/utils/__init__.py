"""Shared utilities: settings, errors, logging and async helpers."""
