"""Presentation-side session state for dashboards built on the engine."""
