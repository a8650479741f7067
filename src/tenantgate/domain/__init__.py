"""Domain layer: RBAC entities and services."""
