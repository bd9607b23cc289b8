"""Data layer - schemas and metric sources."""
