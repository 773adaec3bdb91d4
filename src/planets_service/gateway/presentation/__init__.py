"""Presentation helpers shared by the HTTP routes."""
