"""Domain Layer: interfaces (ports), value objects, DTOs and events.

Has no dependency on the infrastructure layer.
"""
