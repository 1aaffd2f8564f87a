from __future__ import annotations

from pydantic import BaseModel, Field

from barberbot.domain.entities.event import ActionEvent, InboundEvent, StartEvent, TextEvent

START_COMMAND = "/start"


class TelegramUserDTO(BaseModel):
    id: int
    first_name: str | None = None
    username: str | None = None


class TelegramChatDTO(BaseModel):
    id: int


class TelegramMessageDTO(BaseModel):
    message_id: int
    chat: TelegramChatDTO
    from_user: TelegramUserDTO | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramCallbackQueryDTO(BaseModel):
    id: str
    from_user: TelegramUserDTO = Field(alias="from")
    message: TelegramMessageDTO | None = None
    data: str | None = None


class TelegramUpdateDTO(BaseModel):
    update_id: int
    message: TelegramMessageDTO | None = None
    callback_query: TelegramCallbackQueryDTO | None = None

    def to_event(self) -> InboundEvent | None:
        """Map the update to an inbound event, or None for updates the bot does not handle."""
        if self.callback_query is not None:
            query = self.callback_query
            if query.data is None:
                return None
            # Inline-mode callbacks carry no message; answer in the user's private chat.
            conversation_id = str(query.message.chat.id) if query.message else str(query.from_user.id)
            return ActionEvent(
                conversation_id=conversation_id,
                external_user_id=str(query.from_user.id),
                token=query.data,
                callback_id=query.id,
                message_id=str(query.message.message_id) if query.message else None,
            )

        message = self.message
        if message is None or message.text is None or message.from_user is None:
            return None

        conversation_id = str(message.chat.id)
        external_user_id = str(message.from_user.id)
        command = message.text.split(maxsplit=1)[0] if message.text.strip() else ""
        if command == START_COMMAND or command.startswith(START_COMMAND + "@"):
            return StartEvent(conversation_id=conversation_id, external_user_id=external_user_id)
        return TextEvent(conversation_id=conversation_id, external_user_id=external_user_id, body=message.text)
