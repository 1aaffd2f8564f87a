from abc import ABC, abstractmethod

from barberbot.domain.entities.view import View


class MessagePlatformPort(ABC):
    @abstractmethod
    def render_view(self, conversation_id: str, view: View, message_id: str | None = None) -> None:
        """Replace the message the user interacted with, or send a new one when message_id is None."""
        raise NotImplementedError

    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def acknowledge(self, callback_id: str, text: str | None = None, prominent: bool = False) -> None:
        raise NotImplementedError
