"""Utility helpers. Import from the specific modules to avoid import cycles."""
