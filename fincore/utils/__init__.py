"""Shared helpers: date coercion and root finding."""
