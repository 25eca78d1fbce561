"""GitHub API client for the issue assistant.

This module provides an async wrapper around the GitHub REST API for:
- Listing repository directories and fetching decoded file contents
- Creating comments on issues
- Adding labels to issues
- Listing repository labels (paginated)

Source-control calls are not retried: a failed request fails the calling
capability immediately. Rate limiting is detected and surfaced as a
RateLimitError so callers can report when the limit resets.

Depends on:
- src/issue_assistant/github/models.py (RepositoryLabel)
- src/issue_assistant/config.py (github_token, github_base_url)
"""

import base64
import binascii
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from src.issue_assistant.github.models import RepositoryLabel


LABELS_PAGE_SIZE = 100


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
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


class RateLimitError(GitHubAPIError):
    """Raised when GitHub API rate limit is exceeded.

    Attributes:
        reset_at: Unix timestamp when the rate limit resets.
        retry_after: Seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str,
        reset_at: Optional[int] = None,
        retry_after: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.reset_at = reset_at
        self.retry_after = retry_after


class GitHubClient:
    """Async GitHub API client.

    Supports both github.com and GitHub Enterprise Server through
    base_url. A custom httpx transport can be supplied for testing.

    Attributes:
        token: GitHub API token (PAT or Actions GITHUB_TOKEN).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Request timeout in seconds.

    Example:
        >>> async with GitHubClient(token="ghp_xxx") as client:
        ...     await client.create_comment("owner", "repo", 123, "Hello!")
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
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
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "IssueAssistant/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        await self.close()

    def _parse_int_header(
        self,
        headers: httpx.Headers,
        name: str,
    ) -> Optional[int]:
        value = headers.get(name)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                pass
        return None

    def _rate_limit_error(self, response: httpx.Response) -> RateLimitError:
        """Build a RateLimitError from a rate-limited response."""
        reset_at = self._parse_int_header(response.headers, "x-ratelimit-reset")

        retry_after = None
        if reset_at is not None:
            retry_after = max(0, reset_at - int(time.time()))

        retry_after_header = self._parse_int_header(response.headers, "retry-after")
        if retry_after_header is not None:
            retry_after = retry_after_header

        self.logger.warning(
            "GitHub API rate limit exceeded",
            extra={
                "reset_at": reset_at,
                "retry_after": retry_after,
                "limit": self._parse_int_header(response.headers, "x-ratelimit-limit"),
                "used": self._parse_int_header(response.headers, "x-ratelimit-used"),
            },
        )

        return RateLimitError(
            message="GitHub API rate limit exceeded",
            status_code=response.status_code,
            reset_at=reset_at,
            retry_after=retry_after,
            request_url=str(response.url),
        )

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request and map failures to GitHubAPIError.

        Args:
            method: HTTP method (GET, POST, ...).
            path: API path (e.g., /repos/owner/repo/issues/1/comments).
            json_data: Optional JSON body for the request.
            params: Optional query parameters.

        Returns:
            The HTTP response from GitHub.

        Raises:
            RateLimitError: If the rate limit is exceeded.
            GitHubAPIError: On transport errors or error status codes.
        """
        try:
            response = await self.client.request(
                method=method,
                url=path,
                json=json_data,
                params=params,
            )
        except httpx.TimeoutException as e:
            self.logger.error(
                "GitHub API request timed out",
                extra={"path": path, "method": method, "error": str(e)},
            )
            raise GitHubAPIError(
                message=f"Request timed out: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e
        except httpx.RequestError as e:
            self.logger.error(
                "GitHub API request error",
                extra={"path": path, "method": method, "error": str(e)},
            )
            raise GitHubAPIError(
                message=f"Request failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

        if response.status_code == 403:
            remaining = self._parse_int_header(
                response.headers,
                "x-ratelimit-remaining",
            )
            if remaining == 0:
                raise self._rate_limit_error(response)

        if response.status_code == 429:
            raise self._rate_limit_error(response)

        if response.status_code >= 400:
            error_body = response.text
            self.logger.error(
                "GitHub API error",
                extra={
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise GitHubAPIError(
                message=f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        return response

    @staticmethod
    def _contents_path(owner: str, repo: str, path: str) -> str:
        encoded = quote(path.strip("/"), safe="/")
        if encoded:
            return f"/repos/{owner}/{repo}/contents/{encoded}"
        return f"/repos/{owner}/{repo}/contents"

    async def list_directory(
        self,
        owner: str,
        repo: str,
        path: str = "",
    ) -> List[Dict[str, Any]]:
        """List the entries of a repository directory.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            path: Directory path, empty for the repository root.

        Returns:
            Raw content entries as returned by GitHub. A single-object
            response is wrapped in a list.

        Raises:
            GitHubAPIError: If the request fails.
        """
        self.logger.debug(
            "Listing repository directory",
            extra={"owner": owner, "repo": repo, "path": path},
        )

        response = await self._request(
            method="GET",
            path=self._contents_path(owner, repo, path),
        )

        data = response.json()
        if isinstance(data, dict):
            return [data]
        if not isinstance(data, list):
            raise GitHubAPIError(
                message=f"Unexpected contents response for {path or '/'}",
                status_code=response.status_code,
                request_url=str(response.url),
            )
        return data

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
    ) -> str:
        """Fetch and decode the content of a repository file.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            path: File path within the repository.

        Returns:
            File content decoded as UTF-8 text.

        Raises:
            GitHubAPIError: If the request fails, the path is not a file,
                or the content cannot be decoded.
        """
        response = await self._request(
            method="GET",
            path=self._contents_path(owner, repo, path),
        )

        data = response.json()
        if not isinstance(data, dict) or data.get("type") != "file":
            raise GitHubAPIError(
                message=f"Path {path} is not a file",
                status_code=response.status_code,
                request_url=str(response.url),
            )

        content = data.get("content")
        if content is None:
            raise GitHubAPIError(
                message=f"No content found for file: {path}",
                status_code=response.status_code,
                request_url=str(response.url),
            )

        encoding = data.get("encoding", "base64")
        if encoding != "base64":
            if encoding in ("", "none"):
                raise GitHubAPIError(
                    message=f"Content of {path} is too large to be returned inline",
                    status_code=response.status_code,
                    request_url=str(response.url),
                )
            return content

        try:
            return base64.b64decode(content).decode("utf-8")
        except (binascii.Error, ValueError) as e:
            # UnicodeDecodeError is a ValueError subclass
            raise GitHubAPIError(
                message=f"Failed to decode content of {path}: {e}",
                status_code=response.status_code,
                request_url=str(response.url),
            ) from e

    async def create_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> Dict[str, Any]:
        """Create a comment on an issue.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue number to comment on.
            body: Comment body in markdown format.

        Returns:
            The created comment data from GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        self.logger.info(
            "Creating comment on issue",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "body_length": len(body),
            },
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"body": body},
        )

        result = response.json()
        self.logger.info(
            "Comment created successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "comment_id": result.get("id"),
            },
        )

        return result

    async def add_labels(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        labels: List[str],
    ) -> List[Dict[str, Any]]:
        """Add labels to an issue.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue number to label.
            labels: Label names to add.

        Returns:
            List of all labels on the issue after adding.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}/labels"

        self.logger.info(
            "Adding labels to issue",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "labels": labels,
            },
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"labels": list(labels)},
        )

        result = response.json()
        self.logger.info(
            "Labels added successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "labels": labels,
                "total_labels": len(result),
            },
        )

        return result

    async def list_labels(
        self,
        owner: str,
        repo: str,
    ) -> List[RepositoryLabel]:
        """List every label defined on a repository.

        Pages through the labels endpoint 100 at a time until a page is
        short or the Link header has no next page.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.

        Returns:
            Repository labels in the order GitHub returns them.

        Raises:
            GitHubAPIError: If any page request fails.
        """
        path = f"/repos/{owner}/{repo}/labels"
        labels: List[RepositoryLabel] = []
        page = 1

        while True:
            response = await self._request(
                method="GET",
                path=path,
                params={"per_page": LABELS_PAGE_SIZE, "page": page},
            )

            items = response.json()
            for item in items:
                if isinstance(item, dict) and item.get("name"):
                    labels.append(RepositoryLabel.from_github_response(item))

            if len(items) < LABELS_PAGE_SIZE or "next" not in response.links:
                break
            page += 1

        self.logger.debug(
            "Listed repository labels",
            extra={
                "owner": owner,
                "repo": repo,
                "labels_count": len(labels),
                "pages": page,
            },
        )
        return labels
