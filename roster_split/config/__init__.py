"""Generation config loading and validation."""
