"""REST API for the card setup bridge."""
