"""GitCode API client for pull request interactions.

This module provides an async wrapper around the GitCode v5 API for:
- Retrieving and updating pull requests
- Listing linked issues, commits and changed files
- Listing pull request operation logs
- Merging pull requests

Every method returns a ``(resource, found)`` tuple. A 404 response yields
``(None, False)``; any other error status raises GitCodeAPIError. The client
makes exactly one request per call.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://api.gitcode.com/api/v5"


class GitCodeAPIError(Exception):
    """Raised when a GitCode API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitCode API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class GitCodeClient:
    """Async GitCode API client.

    Attributes:
        token: GitCode API access token.
        base_url: Base URL for the GitCode API.
        timeout: Request timeout in seconds.

    Example:
        >>> async with GitCodeClient(token="xxx") as client:
        ...     pr, found = await client.get_pull_request("owner", "repo", 11)
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitCode client.

        Args:
            token: GitCode API token for authentication.
            base_url: Base URL for the GitCode API.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        if not token:
            raise ValueError("GitCode token is required")
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
            "User-Agent": "WebhookGateway/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitCodeClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Any, bool]:
        """Make a single HTTP request and decode the JSON response.

        Returns:
            ``(decoded_json, True)`` on success, ``(None, False)`` on 404.

        Raises:
            GitCodeAPIError: On any other error status or transport failure.
        """
        try:
            response = await self.client.request(
                method=method,
                url=path,
                json=json_data,
                params=params,
            )
        except httpx.RequestError as e:
            logger.error(
                "GitCode API request failed",
                extra={"path": path, "method": method, "error": str(e)},
            )
            raise GitCodeAPIError(
                message=f"GitCode API request failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

        if response.status_code == 404:
            logger.info(
                "GitCode resource not found",
                extra={"path": path, "method": method},
            )
            return None, False

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitCode API error",
                extra={
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise GitCodeAPIError(
                message=f"GitCode API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        if not response.content:
            return None, True
        return response.json(), True

    @staticmethod
    def _pull_path(owner: str, repo: str, number: Any) -> str:
        return f"/repos/{owner}/{repo}/pulls/{number}"

    async def get_pull_request(
        self,
        owner: str,
        repo: str,
        number: Any,
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """Retrieve a single pull request."""
        return await self._request("GET", self._pull_path(owner, repo, number))

    async def update_pull_request(
        self,
        owner: str,
        repo: str,
        number: Any,
        changes: Dict[str, Any],
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """Update a pull request, e.g. ``{"state": "closed"}``."""
        logger.info(
            "Updating pull request",
            extra={
                "owner": owner,
                "repo": repo,
                "number": number,
                "fields": sorted(changes),
            },
        )
        return await self._request(
            "PATCH",
            self._pull_path(owner, repo, number),
            json_data=changes,
        )

    async def list_pull_request_linking_issues(
        self,
        owner: str,
        repo: str,
        number: Any,
    ) -> Tuple[Optional[List[Dict[str, Any]]], bool]:
        """List issues linked to a pull request."""
        return await self._request(
            "GET", self._pull_path(owner, repo, number) + "/issues"
        )

    async def list_pull_request_commits(
        self,
        owner: str,
        repo: str,
        number: Any,
    ) -> Tuple[Optional[List[Dict[str, Any]]], bool]:
        """List commits on a pull request."""
        return await self._request(
            "GET", self._pull_path(owner, repo, number) + "/commits"
        )

    async def get_pull_request_change_files(
        self,
        owner: str,
        repo: str,
        number: Any,
    ) -> Tuple[Optional[List[Dict[str, Any]]], bool]:
        """List files changed by a pull request."""
        return await self._request(
            "GET", self._pull_path(owner, repo, number) + "/files"
        )

    async def list_pull_request_operation_logs(
        self,
        owner: str,
        repo: str,
        number: Any,
        sort: str = "desc",
        page: Any = 1,
    ) -> Tuple[Optional[List[Dict[str, Any]]], bool]:
        """List the operation log of a pull request.

        Args:
            sort: "asc" or "desc" by creation time.
            page: Page number to fetch.
        """
        return await self._request(
            "GET",
            self._pull_path(owner, repo, number) + "/operate_logs",
            params={"sort": sort, "page": page},
        )

    async def merge_pull_request(
        self,
        owner: str,
        repo: str,
        number: Any,
        merge_method: str = "merge",
    ) -> Tuple[Optional[Dict[str, Any]], bool]:
        """Merge a pull request.

        Args:
            merge_method: "merge", "squash" or "rebase".
        """
        logger.info(
            "Merging pull request",
            extra={
                "owner": owner,
                "repo": repo,
                "number": number,
                "merge_method": merge_method,
            },
        )
        return await self._request(
            "PUT",
            self._pull_path(owner, repo, number) + "/merge",
            json_data={"merge_method": merge_method},
        )
