"""
Abstract interface for the pull-request hosting service.

The backport pipeline only needs three remote operations: open a pull
request, label it, and assign it. Implementations wrap a concrete API
(GitHub REST via PyGithub).
"""

from abc import ABC, abstractmethod


class PullRequestService(ABC):
    """Remote service that hosts pull requests.

    All methods are async so implementations can push blocking client calls
    off the event loop.
    """

    async def connect(self) -> None:
        """Establish the client connection. Default: nothing to do."""

    async def disconnect(self) -> None:
        """Release the client connection. Default: nothing to do."""

    @abstractmethod
    async def create_pull_request(self, title: str, head: str, base: str, body: str) -> int:
        """Open a pull request.

        Args:
            title: Pull request title
            head: Branch holding the changes
            base: Branch the changes should be merged into
            body: Pull request description (markdown)

        Returns:
            Number of the created pull request

        Raises:
            ExternalServiceError: If the API request fails
        """

    @abstractmethod
    async def add_labels(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue or pull request. No-op for an empty list.

        Raises:
            ExternalServiceError: If the API request fails
        """

    @abstractmethod
    async def add_assignee(self, issue_number: int, assignee: str | None) -> None:
        """Assign a user to an issue or pull request. No-op for an empty name.

        Raises:
            ExternalServiceError: If the API request fails
        """
