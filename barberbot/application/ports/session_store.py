from abc import ABC, abstractmethod

from barberbot.domain.entities.session import Session


class SessionStorePort(ABC):
    @abstractmethod
    def get(self, conversation_id: str) -> Session:
        """Return the session, creating an empty one on first access."""
        raise NotImplementedError

    @abstractmethod
    def put(self, conversation_id: str, session: Session) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self, conversation_id: str) -> None:
        raise NotImplementedError
