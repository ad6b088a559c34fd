"""Domain layer: entities, failures, repository contracts and services."""
