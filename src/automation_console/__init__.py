"""Automation Console - operations dashboard backend for four managed automations."""

__version__ = "0.3.0"
