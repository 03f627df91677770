"""Interface for presenting SDK results to a user.

Defines the contract used by the command line front-end for displaying
messages, users, errors and informational text, allowing different UI
implementations (e.g., rich console, plain text for tests).
"""

import abc
from typing import Any, Sequence

from ..models.envelope import ErrorInfo
from ..models.message import Message
from ..models.user import UserBasicInfo


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_messages(self, messages: Sequence[Message], **kwargs: Any) -> None:
        """Displays a list of messages.

        Args:
            messages: Messages to render, newest first.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_user(self, user: UserBasicInfo, **kwargs: Any) -> None:
        """Displays a single user profile."""
        pass

    @abc.abstractmethod
    def display_failure(self, failure: ErrorInfo, **kwargs: Any) -> None:
        """Displays the captured failure of a faulted operation."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user.

        Args:
            info_message: The informational message string.
            **kwargs: Additional arguments for formatting.
        """
        pass
