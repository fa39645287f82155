"""
Interview session state machine.

Tracks one voice call (INACTIVE -> CONNECTING -> ACTIVE -> FINISHED),
accumulates its final transcript fragments and, on FINISHED, hands the
transcript to the feedback generator exactly once.

Events and user commands go through a single asyncio.Queue consumed by
run(), so handlers for one session never overlap.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from prepwise.core.config import VAPI_WORKFLOW_ID
from prepwise.services.feedback_service import FeedbackResult
from prepwise.session.events import (
    CallEndEvent,
    CallStartEvent,
    ErrorEvent,
    MessageEvent,
    SpeechEndEvent,
    SpeechStartEvent,
)
from prepwise.session.interviewer import INTERVIEWER
from prepwise.session.voice_client import VoiceCallClient

logger = logging.getLogger(__name__)

HOME_REDIRECT = "/"


class CallStatus(str, Enum):
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class SessionMode(str, Enum):
    GENERATE = "generate"  # open-ended call that collects parameters for a new interview
    INTERVIEW = "interview"  # structured call over a fixed question list


class SessionStateError(Exception):
    """Raised when an operation is not allowed in the current call status."""


@dataclass(frozen=True)
class SavedMessage:
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class SessionContext:
    user_name: str
    user_id: str
    interview_id: Optional[str] = None
    feedback_id: Optional[str] = None
    questions: list[str] = field(default_factory=list)


@dataclass
class StartCall:
    mode: SessionMode
    context: SessionContext


@dataclass
class Disconnect:
    pass


@dataclass
class ChannelClosed:
    """The UI went away; end any live call and stop consuming events."""
    pass


FeedbackHandler = Callable[[str, str, list[SavedMessage], Optional[str]], Awaitable[FeedbackResult]]
Notifier = Callable[[dict], Awaitable[None]]


def format_questions(questions: list[str]) -> str:
    """One question per line, each prefixed with '- '."""
    return "\n".join(f"- {question}" for question in questions)


def feedback_redirect(interview_id: str) -> str:
    return f"/interview/{interview_id}/feedback"


class InterviewSession:
    """One live call between a user and the AI interviewer."""

    def __init__(
        self,
        client: VoiceCallClient,
        feedback_handler: FeedbackHandler,
        notify: Optional[Notifier] = None,
        workflow_id: str = VAPI_WORKFLOW_ID,
        interviewer: Optional[dict] = None,
    ):
        self.client = client
        self.feedback_handler = feedback_handler
        self.notify = notify
        self.workflow_id = workflow_id
        self.interviewer = interviewer or INTERVIEWER

        self.status = CallStatus.INACTIVE
        self.mode: Optional[SessionMode] = None
        self.context: Optional[SessionContext] = None
        self.messages: list[SavedMessage] = []
        self.last_message = ""
        self.is_speaking = False
        self.last_error: Optional[str] = None

        self.redirect_to: Optional[str] = None
        self.feedback_result: Optional[FeedbackResult] = None

        self._handoff_done = False
        self._closed = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    @property
    def transcript(self) -> list[SavedMessage]:
        return list(self.messages)

    @property
    def done(self) -> bool:
        return self._handoff_done or self._closed

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start(self, mode: Union[SessionMode, str], context: SessionContext) -> None:
        """
        Start a call in the given mode.

        Raises:
            SessionStateError: if a call is already connecting or active
        """
        mode = SessionMode(mode)
        if self.status in (CallStatus.CONNECTING, CallStatus.ACTIVE):
            raise SessionStateError(f"Cannot start a call while {self.status.value}")

        if self.status is CallStatus.FINISHED:
            self._reset()

        self.mode = mode
        self.context = context
        self.status = CallStatus.CONNECTING
        await self._publish_status()

        if mode is SessionMode.GENERATE:
            target = self.workflow_id
            variables = {"username": context.user_name, "userid": context.user_id}
        else:
            target = self.interviewer
            variables = {"questions": format_questions(context.questions)}

        logger.info(f"Starting call: mode={mode.value}, user_id={context.user_id}, interview_id={context.interview_id}")
        try:
            await self.client.start(target, variables)
        except Exception as e:
            logger.error(f"Voice client failed to start call: {e}", exc_info=True)
            self.last_error = str(e)
            # Nothing was said, so there is nothing to assess
            self.status = CallStatus.FINISHED
            self._handoff_done = True
            self.redirect_to = HOME_REDIRECT
            await self._publish_finished(success=False)

    async def disconnect(self) -> None:
        """User hang-up. No-op when no call is live."""
        if self.status in (CallStatus.INACTIVE, CallStatus.FINISHED):
            logger.debug(f"Disconnect ignored in status {self.status.value}")
            return

        self.status = CallStatus.FINISHED
        try:
            await self.client.stop()
        except Exception as e:
            logger.warning(f"Voice client failed to stop call: {e}")
        await self._finish()

    # ------------------------------------------------------------------
    # Voice client events
    # ------------------------------------------------------------------

    async def on_call_started(self) -> None:
        if self.status is not CallStatus.CONNECTING:
            logger.debug(f"call-start ignored in status {self.status.value}")
            return
        self.status = CallStatus.ACTIVE
        await self._publish_status()

    async def on_call_ended(self) -> None:
        if self.status is CallStatus.INACTIVE:
            logger.debug("call-end ignored before any call was started")
            return
        await self._finish()

    async def on_transcript_fragment(self, role: str, text: str) -> None:
        """Append a final transcript fragment while the call is live."""
        if self.status not in (CallStatus.CONNECTING, CallStatus.ACTIVE):
            logger.debug(f"Transcript fragment discarded in status {self.status.value}")
            return
        self.messages.append(SavedMessage(role=role, content=text))
        self.last_message = text
        await self._publish_status()

    async def on_speech_start(self) -> None:
        if self.status is CallStatus.FINISHED:
            return
        self.is_speaking = True
        await self._publish_status()

    async def on_speech_end(self) -> None:
        if self.status is CallStatus.FINISHED:
            return
        self.is_speaking = False
        await self._publish_status()

    async def on_error(self, reason) -> None:
        logger.warning(f"Voice client error: {reason}")
        self.last_error = str(reason)

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def submit(self, item) -> None:
        """Queue a voice event or command for run()."""
        self._inbox.put_nowait(item)

    async def dispatch(self, item) -> None:
        """Handle one queued item."""
        if isinstance(item, StartCall):
            try:
                await self.start(item.mode, item.context)
            except SessionStateError as e:
                logger.warning(f"Start rejected: {e}")
        elif isinstance(item, Disconnect):
            await self.disconnect()
        elif isinstance(item, ChannelClosed):
            await self.disconnect()
            self._closed = True
        elif isinstance(item, CallStartEvent):
            await self.on_call_started()
        elif isinstance(item, CallEndEvent):
            await self.on_call_ended()
        elif isinstance(item, MessageEvent):
            # Partial fragments are superseded by a final one
            if item.message.is_final_transcript:
                await self.on_transcript_fragment(item.message.role, item.message.transcript)
        elif isinstance(item, SpeechStartEvent):
            await self.on_speech_start()
        elif isinstance(item, SpeechEndEvent):
            await self.on_speech_end()
        elif isinstance(item, ErrorEvent):
            await self.on_error(item.error)
        else:
            logger.warning(f"Unknown session item: {type(item).__name__}")

    async def run(self) -> None:
        """Consume queued items one at a time until the session is done."""
        while not self.done:
            item = await self._inbox.get()
            await self.dispatch(item)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self.messages = []
        self.last_message = ""
        self.is_speaking = False
        self.last_error = None
        self.redirect_to = None
        self.feedback_result = None
        self._handoff_done = False

    async def _finish(self) -> None:
        self.status = CallStatus.FINISHED
        self.is_speaking = False

        if self._handoff_done:
            logger.debug("Session already finished, handoff skipped")
            return
        # Latch before awaiting so a duplicate call-end cannot re-enter
        self._handoff_done = True
        await self._publish_status()

        if self.mode is SessionMode.GENERATE:
            self.redirect_to = HOME_REDIRECT
            await self._publish_finished(success=True)
            return

        self.redirect_to = await self._hand_off_transcript()
        await self._publish_finished(success=self.feedback_result.success)

    async def _hand_off_transcript(self) -> str:
        context = self.context
        try:
            result = await self.feedback_handler(
                context.interview_id,
                context.user_id,
                list(self.messages),
                context.feedback_id,
            )
        except Exception as e:
            logger.error(f"Feedback handler raised: {e}", exc_info=True)
            result = FeedbackResult(success=False, error=str(e))

        self.feedback_result = result
        if result.success and result.feedback_id:
            return feedback_redirect(context.interview_id)

        logger.warning(f"Error saving feedback for interview_id={context.interview_id}: {result.error}")
        return HOME_REDIRECT

    def snapshot(self) -> dict:
        return {
            "event": "status",
            "status": self.status.value,
            "is_speaking": self.is_speaking,
            "last_message": self.last_message,
            "message_count": len(self.messages),
        }

    async def _send(self, payload: dict) -> None:
        if self.notify is None:
            return
        try:
            await self.notify(payload)
        except Exception as e:
            logger.debug(f"Session update not delivered: {e}")

    async def _publish_status(self) -> None:
        await self._send(self.snapshot())

    async def _publish_finished(self, success: bool) -> None:
        result = self.feedback_result
        await self._send({
            "event": "finished",
            "redirect": self.redirect_to,
            "success": success,
            "feedback_id": result.feedback_id if result else None,
        })
