"""Shared types, clocks, event bus and configuration."""
