"""yamnet: async client SDK for the Yammer REST API.

Every call returns a ResultEnvelope; requests are hardened by a bounded
retry loop with status-aware backoff (see infrastructure.resilience).
"""

__version__ = "0.3.0"
