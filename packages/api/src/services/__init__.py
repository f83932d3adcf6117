# This project was developed with assistance from AI tools.
"""Guarantor qualification engine and its storage collaborators."""
