"""Core Application Layer: endpoint clients and the YammerClient facade.

Connects callers with the request-execution infrastructure. Endpoint clients
only map resources to URLs and query parameters.
"""
