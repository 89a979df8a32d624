"""Email channel port — abstract interface for email dispatch."""

from abc import ABC, abstractmethod

from shared.errors import TransientInfraError


class EmailSendError(TransientInfraError):
    """The email provider did not accept the message. Safe to retry."""


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str, sender: str | None = None) -> str:
        """Send an email message and return the provider's message id.

        Raises:
            EmailSendError: when the provider rejects or cannot be reached
        """
        ...
