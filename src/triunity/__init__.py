# src/triunity/__init__.py
"""Simulated telemetry API for the TriUnity network."""

__version__ = "3.0.0"
