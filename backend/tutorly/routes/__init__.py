"""HTTP routes. Versioned endpoints live in ``routes.v1``."""
