"""Domain services: identifier normalization, identity resolution and account storage."""
