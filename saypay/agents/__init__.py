"""Agents that drive multi-step expense flows."""
