"""Domain models: value objects, the result envelope, errors and API DTOs."""
