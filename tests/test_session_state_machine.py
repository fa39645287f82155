"""
Tests for the interview session state machine.
"""
import asyncio
import pytest

from prepwise.services.feedback_service import FeedbackResult
from prepwise.session.events import parse_event
from prepwise.session.interviewer import INTERVIEWER
from prepwise.session.state_machine import (
    CallStatus,
    ChannelClosed,
    Disconnect,
    InterviewSession,
    SavedMessage,
    SessionContext,
    SessionMode,
    SessionStateError,
    StartCall,
    format_questions,
)
from prepwise.session.voice_client import VoiceCallClient


class FakeVoiceClient(VoiceCallClient):
    def __init__(self, fail_start: bool = False, fail_stop: bool = False):
        self.fail_start = fail_start
        self.fail_stop = fail_stop
        self.started = []
        self.stop_calls = 0

    async def start(self, target, variables):
        if self.fail_start:
            raise ConnectionError("could not reach voice service")
        self.started.append((target, variables))

    async def stop(self):
        self.stop_calls += 1
        if self.fail_stop:
            raise ConnectionError("already gone")


class RecordingFeedbackHandler:
    def __init__(self, result: FeedbackResult = None, raises: bool = False):
        self.result = result or FeedbackResult(success=True, feedback_id="fb-1")
        self.raises = raises
        self.calls = []

    async def __call__(self, interview_id, user_id, transcript, feedback_id):
        self.calls.append((interview_id, user_id, list(transcript), feedback_id))
        if self.raises:
            raise RuntimeError("database is down")
        return self.result


def interview_context(**overrides):
    values = dict(
        user_name="Ada",
        user_id="user-1",
        interview_id="iv-1",
        questions=["What is a closure?", "Explain ACID."],
    )
    values.update(overrides)
    return SessionContext(**values)


def transcript_event(role, text, transcript_type="final"):
    return parse_event({
        "event": "message",
        "message": {"type": "transcript", "transcriptType": transcript_type, "role": role, "transcript": text},
    })


def make_session(client=None, handler=None, notify=None):
    return InterviewSession(
        client=client or FakeVoiceClient(),
        feedback_handler=handler or RecordingFeedbackHandler(),
        notify=notify,
        workflow_id="wf-123",
    )


def test_format_questions_one_per_line():
    assert format_questions(["A?", "B?"]) == "- A?\n- B?"
    assert format_questions([]) == ""


def test_interview_mode_start_passes_formatted_questions():
    async def scenario():
        client = FakeVoiceClient()
        session = make_session(client=client)
        await session.start("interview", interview_context())
        return session, client

    session, client = asyncio.run(scenario())
    assert session.status is CallStatus.CONNECTING
    target, variables = client.started[0]
    assert target is INTERVIEWER
    assert variables == {"questions": "- What is a closure?\n- Explain ACID."}


def test_generate_mode_start_passes_user_identity_only():
    async def scenario():
        client = FakeVoiceClient()
        session = make_session(client=client)
        await session.start(SessionMode.GENERATE, interview_context(interview_id=None, questions=[]))
        return client

    client = asyncio.run(scenario())
    assert client.started == [("wf-123", {"username": "Ada", "userid": "user-1"})]


def test_start_rejected_while_connecting_or_active():
    async def scenario():
        session = make_session()
        await session.start("interview", interview_context())
        with pytest.raises(SessionStateError):
            await session.start("interview", interview_context())
        await session.on_call_started()
        assert session.status is CallStatus.ACTIVE
        with pytest.raises(SessionStateError):
            await session.start("interview", interview_context())

    asyncio.run(scenario())


def test_transcript_keeps_only_final_fragments_in_order():
    async def scenario():
        session = make_session()
        session.submit(StartCall(SessionMode.INTERVIEW, interview_context()))
        session.submit(parse_event({"event": "call-start"}))
        session.submit(transcript_event("assistant", "Hel", "partial"))
        session.submit(transcript_event("assistant", "Hello there"))
        session.submit(transcript_event("user", "Hi", "partial"))
        session.submit(transcript_event("user", "Hi, I'm Ada"))
        session.submit(parse_event({"event": "message", "message": {"type": "status-update"}}))
        session.submit(transcript_event("assistant", "Let's begin"))
        session.submit(parse_event({"event": "call-end"}))
        await session.run()
        return session

    session = asyncio.run(scenario())
    assert session.transcript == [
        SavedMessage("assistant", "Hello there"),
        SavedMessage("user", "Hi, I'm Ada"),
        SavedMessage("assistant", "Let's begin"),
    ]
    assert session.last_message == "Let's begin"
    assert session.status is CallStatus.FINISHED


def test_interview_mode_hands_transcript_to_feedback_exactly_once():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(handler=handler)
        await session.start("interview", interview_context(feedback_id="fb-existing"))
        await session.on_call_started()
        await session.on_transcript_fragment("user", "Hi")
        await session.on_call_ended()
        # duplicate delivery
        await session.on_call_ended()
        await session.disconnect()
        return session, handler

    session, handler = asyncio.run(scenario())
    assert handler.calls == [("iv-1", "user-1", [SavedMessage("user", "Hi")], "fb-existing")]
    assert session.redirect_to == "/interview/iv-1/feedback"


def test_generate_mode_never_generates_feedback():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(handler=handler)
        await session.start("generate", interview_context(interview_id=None))
        await session.on_call_started()
        await session.on_transcript_fragment("user", "I want a backend interview")
        await session.on_call_ended()
        return session, handler

    session, handler = asyncio.run(scenario())
    assert session.status is CallStatus.FINISHED
    assert handler.calls == []
    assert session.redirect_to == "/"


@pytest.mark.parametrize("reach_active", [False, True])
def test_disconnect_finishes_and_is_idempotent(reach_active):
    async def scenario():
        client = FakeVoiceClient()
        handler = RecordingFeedbackHandler()
        session = make_session(client=client, handler=handler)
        await session.start("interview", interview_context())
        if reach_active:
            await session.on_call_started()
            await session.on_transcript_fragment("user", "Hi")
        await session.disconnect()
        first = session.transcript
        await session.disconnect()
        return session, client, handler, first

    session, client, handler, first = asyncio.run(scenario())
    assert session.status is CallStatus.FINISHED
    assert session.transcript == first
    assert client.stop_calls == 1
    assert len(handler.calls) == 1


def test_disconnect_before_start_is_noop():
    async def scenario():
        client = FakeVoiceClient()
        session = make_session(client=client)
        await session.disconnect()
        return session, client

    session, client = asyncio.run(scenario())
    assert session.status is CallStatus.INACTIVE
    assert client.stop_calls == 0


def test_late_events_after_finished_are_discarded():
    async def scenario():
        session = make_session()
        await session.start("interview", interview_context())
        await session.on_call_started()
        await session.on_transcript_fragment("user", "Hi")
        await session.disconnect()
        await session.on_transcript_fragment("assistant", "Goodbye")
        await session.on_call_started()
        return session

    session = asyncio.run(scenario())
    assert session.transcript == [SavedMessage("user", "Hi")]
    assert session.status is CallStatus.FINISHED


def test_speech_events_after_finished_are_ignored():
    sent = []

    async def notify(payload):
        sent.append(payload)

    async def scenario():
        session = make_session(notify=notify)
        await session.start("interview", interview_context())
        await session.on_call_started()
        await session.on_speech_start()
        await session.on_call_ended()
        published = len(sent)
        await session.on_speech_start()
        await session.on_speech_end()
        return session, published

    session, published = asyncio.run(scenario())
    assert session.is_speaking is False
    assert len(sent) == published


def test_stop_failure_still_finishes():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(client=FakeVoiceClient(fail_stop=True), handler=handler)
        await session.start("interview", interview_context())
        await session.on_call_started()
        await session.disconnect()
        return session, handler

    session, handler = asyncio.run(scenario())
    assert session.status is CallStatus.FINISHED
    assert len(handler.calls) == 1


def test_start_failure_finishes_without_feedback():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(client=FakeVoiceClient(fail_start=True), handler=handler)
        session.submit(StartCall(SessionMode.INTERVIEW, interview_context()))
        await session.run()
        return session, handler

    session, handler = asyncio.run(scenario())
    assert session.status is CallStatus.FINISHED
    assert session.redirect_to == "/"
    assert "could not reach voice service" in session.last_error
    assert handler.calls == []


def test_feedback_failure_redirects_home():
    async def scenario():
        handler = RecordingFeedbackHandler(result=FeedbackResult(success=False, error="Scoring failed"))
        session = make_session(handler=handler)
        await session.start("interview", interview_context())
        await session.on_call_ended()
        return session

    session = asyncio.run(scenario())
    assert session.redirect_to == "/"
    assert session.feedback_result.success is False


def test_feedback_handler_exception_is_contained():
    async def scenario():
        session = make_session(handler=RecordingFeedbackHandler(raises=True))
        await session.start("interview", interview_context())
        await session.on_call_ended()
        return session

    session = asyncio.run(scenario())
    assert session.status is CallStatus.FINISHED
    assert session.redirect_to == "/"


def test_empty_transcript_is_still_handed_off():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(handler=handler)
        await session.start("interview", interview_context())
        await session.on_call_ended()
        return handler

    handler = asyncio.run(scenario())
    assert handler.calls[0][2] == []


def test_error_event_is_not_fatal():
    async def scenario():
        session = make_session()
        await session.start("interview", interview_context())
        await session.on_call_started()
        await session.dispatch(parse_event({"event": "error", "error": "mic permission denied"}))
        return session

    session = asyncio.run(scenario())
    assert session.status is CallStatus.ACTIVE
    assert session.last_error == "mic permission denied"


def test_speech_events_only_toggle_indicator():
    async def scenario():
        session = make_session()
        await session.start("interview", interview_context())
        await session.on_call_started()
        await session.dispatch(parse_event({"event": "speech-start"}))
        speaking = session.is_speaking
        await session.dispatch(parse_event({"event": "speech-end"}))
        return session, speaking

    session, speaking = asyncio.run(scenario())
    assert speaking is True
    assert session.is_speaking is False
    assert session.transcript == []
    assert session.status is CallStatus.ACTIVE


def test_restart_after_finished_begins_fresh_call():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(handler=handler)
        await session.start("interview", interview_context())
        await session.on_transcript_fragment("user", "first call")
        await session.on_call_ended()
        await session.start("interview", interview_context())
        await session.on_transcript_fragment("user", "second call")
        await session.on_call_ended()
        return handler

    handler = asyncio.run(scenario())
    assert [call[2] for call in handler.calls] == [
        [SavedMessage("user", "first call")],
        [SavedMessage("user", "second call")],
    ]


def test_channel_closed_before_start_ends_run_loop():
    async def scenario():
        handler = RecordingFeedbackHandler()
        session = make_session(handler=handler)
        session.submit(ChannelClosed())
        await asyncio.wait_for(session.run(), timeout=1)
        return session, handler

    session, handler = asyncio.run(scenario())
    assert session.status is CallStatus.INACTIVE
    assert handler.calls == []


def test_updates_are_published_and_send_errors_ignored():
    sent = []

    async def notify(payload):
        sent.append(payload)
        if payload["event"] == "finished":
            raise RuntimeError("socket closed")

    async def scenario():
        session = make_session(notify=notify)
        session.submit(StartCall(SessionMode.INTERVIEW, interview_context()))
        session.submit(parse_event({"event": "call-start"}))
        session.submit(transcript_event("user", "Hi"))
        session.submit(Disconnect())
        await session.run()

    asyncio.run(scenario())
    statuses = [p["status"] for p in sent if p["event"] == "status"]
    assert statuses[:3] == ["CONNECTING", "ACTIVE", "ACTIVE"]
    assert sent[-1] == {
        "event": "finished",
        "redirect": "/interview/iv-1/feedback",
        "success": True,
        "feedback_id": "fb-1",
    }
