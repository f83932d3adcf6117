# This project was developed with assistance from AI tools.
"""Guarantor onboarding API."""
