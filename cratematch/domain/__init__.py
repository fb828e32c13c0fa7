"""Domain layer: purchase and release entities plus pure matching logic."""
