"""Core services for the card setup bridge."""
