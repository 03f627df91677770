"""Endpoint clients for individual Yammer REST resources."""
