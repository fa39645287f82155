"""
Events delivered by the voice call client, plus the actions a browser may send.

The browser runs the vendor voice SDK and forwards its callbacks as JSON
objects tagged with "event"; user button presses arrive tagged with "action".
"""
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter


class VendorMessage(BaseModel):
    """Payload of a vendor "message" callback. Only transcripts are used."""
    type: str
    transcript_type: Optional[Literal["partial", "final"]] = Field(None, alias="transcriptType")
    role: Optional[Literal["user", "assistant", "system"]] = None
    transcript: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def is_final_transcript(self) -> bool:
        return (
            self.type == "transcript"
            and self.transcript_type == "final"
            and self.role is not None
            and self.transcript is not None
        )


class CallStartEvent(BaseModel):
    event: Literal["call-start"]


class CallEndEvent(BaseModel):
    event: Literal["call-end"]


class MessageEvent(BaseModel):
    event: Literal["message"]
    message: VendorMessage


class SpeechStartEvent(BaseModel):
    event: Literal["speech-start"]


class SpeechEndEvent(BaseModel):
    event: Literal["speech-end"]


class ErrorEvent(BaseModel):
    event: Literal["error"]
    error: Any = None


VoiceEvent = Annotated[
    Union[CallStartEvent, CallEndEvent, MessageEvent, SpeechStartEvent, SpeechEndEvent, ErrorEvent],
    Field(discriminator="event"),
]

_voice_event_adapter = TypeAdapter(VoiceEvent)


class ClientAction(BaseModel):
    """A user action from the call screen."""
    action: Literal["start", "disconnect"]


def parse_event(data: dict):
    """
    Parse one inbound JSON object.

    Returns:
        ClientAction or one of the VoiceEvent models

    Raises:
        pydantic.ValidationError: unknown or malformed payload
    """
    if "action" in data:
        return ClientAction.model_validate(data)
    return _voice_event_adapter.validate_python(data)
