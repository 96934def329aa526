"""Tools used by the agents."""
