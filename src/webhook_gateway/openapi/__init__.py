"""GitCode API client for pull request interactions."""

from src.webhook_gateway.openapi.client import GitCodeAPIError, GitCodeClient

__all__ = [
    "GitCodeAPIError",
    "GitCodeClient",
]
