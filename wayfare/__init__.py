"""Wayfare agency membership and authorization API."""
