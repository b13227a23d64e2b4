"""Browsing client for the public Marvel character catalog."""
