"""Unlingo translation management backend."""
