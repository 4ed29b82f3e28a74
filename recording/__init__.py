"""Spike file persistence."""
