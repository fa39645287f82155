"""
End-to-end tests for the /ws/interview-session WebSocket.
"""
import pytest
from starlette.websockets import WebSocketDisconnect

from prepwise.db.models import Feedback
from prepwise.schemas.interview import InterviewCreate
from prepwise.services.interview_service import create_interview


@pytest.fixture
def interview(db_session, test_user):
    return create_interview(
        db_session,
        InterviewCreate(
            role="Backend Engineer",
            type="Technical",
            level="Mid",
            questions=["How do you design an idempotent API?", "Explain Go's concurrency model."],
        ),
        test_user.id,
    )


def receive_until(ws, predicate):
    """Read messages until one matches, returning everything read."""
    received = []
    while True:
        payload = ws.receive_json()
        received.append(payload)
        if predicate(payload):
            return received


def transcript_event(role, text, transcript_type="final"):
    return {
        "event": "message",
        "message": {"type": "transcript", "transcriptType": transcript_type, "role": role, "transcript": text},
    }


def test_rejects_invalid_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/interview-session?token=bad&mode=interview&interview_id=x") as ws:
            ws.receive_json()


def test_rejects_unknown_interview(client, test_user_token):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(
            f"/ws/interview-session?token={test_user_token}&mode=interview&interview_id=missing"
        ) as ws:
            ws.receive_json()


def test_interview_call_writes_feedback(client, test_user_token, interview, scorer, db_session):
    url = f"/ws/interview-session?token={test_user_token}&mode=interview&interview_id={interview.id}"
    with client.websocket_connect(url) as ws:
        ws.send_json({"action": "start"})
        received = receive_until(ws, lambda p: p.get("command") == "start")
        assert received[0]["status"] == "CONNECTING"
        assert received[-1]["variables"]["questions"] == (
            "- How do you design an idempotent API?\n- Explain Go's concurrency model."
        )

        ws.send_json({"event": "call-start"})
        ws.send_json({"event": "speech-start"})
        ws.send_json(transcript_event("assistant", "How do you design an", "partial"))
        ws.send_json(transcript_event("assistant", "How do you design an idempotent API?"))
        ws.send_json(transcript_event("user", "With idempotency keys stored per request."))
        ws.send_json({"event": "call-end"})

        received = receive_until(ws, lambda p: p.get("event") == "finished")

    finished = received[-1]
    assert finished["success"] is True
    assert finished["redirect"] == f"/interview/{interview.id}/feedback"

    statuses = [p for p in received if p.get("event") == "status"]
    assert statuses[-1]["status"] == "FINISHED"
    assert statuses[-1]["message_count"] == 2

    assert scorer.calls == [[
        {"role": "assistant", "content": "How do you design an idempotent API?"},
        {"role": "user", "content": "With idempotency keys stored per request."},
    ]]
    feedback = db_session.get(Feedback, finished["feedback_id"])
    assert feedback is not None
    assert feedback.interview_id == interview.id
    assert feedback.total_score == 72


def test_user_disconnect_stops_call_and_writes_feedback(client, test_user_token, interview, db_session):
    url = f"/ws/interview-session?token={test_user_token}&mode=interview&interview_id={interview.id}"
    with client.websocket_connect(url) as ws:
        ws.send_json({"action": "start"})
        receive_until(ws, lambda p: p.get("command") == "start")
        ws.send_json({"event": "call-start"})
        ws.send_json(transcript_event("user", "Hello."))
        ws.send_json({"action": "disconnect"})

        received = receive_until(ws, lambda p: p.get("event") == "finished")

    assert {"command": "stop"} in received
    assert received[-1]["success"] is True
    assert db_session.query(Feedback).count() == 1


def test_generate_mode_skips_feedback(client, test_user, test_user_token, scorer, db_session):
    with client.websocket_connect(f"/ws/interview-session?token={test_user_token}&mode=generate") as ws:
        ws.send_json({"action": "start"})
        received = receive_until(ws, lambda p: p.get("command") == "start")
        assert received[-1]["variables"] == {"username": "Test User", "userid": test_user.id}

        ws.send_json({"event": "call-start"})
        ws.send_json({"event": "call-end"})
        received = receive_until(ws, lambda p: p.get("event") == "finished")

    assert received[-1]["redirect"] == "/"
    assert received[-1]["feedback_id"] is None
    assert scorer.calls == []
    assert db_session.query(Feedback).count() == 0


def test_malformed_messages_are_ignored(client, test_user_token, interview):
    url = f"/ws/interview-session?token={test_user_token}&mode=interview&interview_id={interview.id}"
    with client.websocket_connect(url) as ws:
        ws.send_json({"event": "not-a-real-event"})
        ws.send_json({"action": "dance"})
        ws.send_json({"action": "start"})
        received = receive_until(ws, lambda p: p.get("command") == "start")
        assert received[0]["status"] == "CONNECTING"

        ws.send_json({"event": "call-end"})
        received = receive_until(ws, lambda p: p.get("event") == "finished")

    # empty transcript still produces a default assessment
    assert received[-1]["success"] is True
