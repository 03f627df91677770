"""Domain Event definitions.

Represents significant occurrences during request execution that callers
might react to (telemetry, rate-limit monitoring).
"""
