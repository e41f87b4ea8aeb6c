"""Marker model, threat geometry, classification and screen projection."""
