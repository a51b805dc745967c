"""Service layer: business rules and transaction ownership."""
