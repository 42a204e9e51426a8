"""Versioned configuration data for the OICP flag engine."""
