"""DRONERISK: drone risk assessment and mitigation engine."""

__version__ = "0.1.0"
