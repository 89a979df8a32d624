"""Email channel registry.

Uses the fake adapter by default; a real provider adapter can be swapped in
with ``set_email_channel`` at startup.
"""

from notifications.channel.email_port import EmailPort, EmailSendError

__all__ = ["EmailPort", "EmailSendError", "get_email_channel", "reset_email_channel", "set_email_channel"]

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        from notifications.channel.fake_email import FakeEmailAdapter

        _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    """Reset the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
