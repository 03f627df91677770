"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the SDK to the outside world (HTTP transport, JSON wire format,
configuration files, console) by implementing the interfaces defined in the
domain layer. Also hosts the resilient request-execution engine.
"""
