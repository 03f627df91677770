"""API Resilience Implementations.

Contains the retry-execution engine that drives the transport through a
bounded retry loop with status-aware delays.
Bounded Context: API Resilience
"""
