"""LINE webhook event schemas.

Only the fields the bot reads are modelled. Everything is optional and
unknown fields are ignored, so new event types never break parsing.
"""

from pydantic import BaseModel, ConfigDict, Field


class EventMessage(BaseModel):
    """The ``message`` object of a message event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str | None = None
    text: str | None = None


class EventSource(BaseModel):
    """Where the event came from: a user, a group or a room."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str | None = None
    user_id: str | None = Field(default=None, alias="userId")
    group_id: str | None = Field(default=None, alias="groupId")
    room_id: str | None = Field(default=None, alias="roomId")

    @property
    def push_target(self) -> str | None:
        """userId, then groupId, then roomId."""
        return self.user_id or self.group_id or self.room_id


class InboundEvent(BaseModel):
    """One entry of the webhook ``events`` array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str | None = None
    message: EventMessage | None = None
    reply_token: str | None = Field(default=None, alias="replyToken")
    source: EventSource | None = None

    @property
    def is_text_message(self) -> bool:
        return (
            self.type == "message"
            and self.message is not None
            and self.message.type == "text"
        )

    @property
    def push_target(self) -> str | None:
        return self.source.push_target if self.source else None
