"""Models for Behavior Guard."""
