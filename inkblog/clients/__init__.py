# inkblog/clients/__init__.py

"""
Import directly from the specific modules to avoid circular dependencies.

This file should remain minimal to prevent import cycles
"""
