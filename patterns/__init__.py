"""Reusable patterns for building service verticals.

Each module demonstrates a self-contained pattern that can be adapted
to any domain: rules engines, workflow state machines, repository layers,
and domain configuration.
"""
