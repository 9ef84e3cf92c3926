"""Sample shop package."""
