# This project was developed with assistance from AI tools.
"""Shared schema components."""
