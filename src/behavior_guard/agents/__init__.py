"""Agent modules for Behavior Guard.

Stateless agents (classification, URL, explanation) are used by the
engine; the device and usage agents sit on top of it.
"""
