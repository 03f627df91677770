"""HTTP plumbing: transport adapter, request builder, response handler and
the caller-facing JsonServiceClient.
"""
