"""Common base for endpoint clients."""

from yamnet.infrastructure.http.service_client import JsonServiceClient


class ClientBase:
    """Holds the shared JsonServiceClient and builds resource paths."""

    def __init__(self, client: JsonServiceClient):
        self.client = client

    def get_final_url(self, path: str) -> str:
        return self.client.request_builder.build_url(path)
