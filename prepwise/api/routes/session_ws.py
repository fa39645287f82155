"""
Live interview session over WebSocket.

The browser runs the voice SDK and forwards its callbacks here; the server
owns the session state machine, relays start/stop back to the browser and
writes feedback when the call ends.
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from prepwise.core.auth_dependency import get_db, get_user_from_token
from prepwise.services.feedback_service import create_feedback
from prepwise.services.interview_service import get_interview
from prepwise.services.scoring_service import TranscriptScorer, get_transcript_scorer
from prepwise.session.events import ClientAction, parse_event
from prepwise.session.state_machine import (
    ChannelClosed,
    Disconnect,
    InterviewSession,
    SavedMessage,
    SessionContext,
    SessionMode,
    StartCall,
)
from prepwise.session.voice_client import WebSocketVoiceClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Session"])


@router.websocket("/ws/interview-session")
async def interview_session(
    websocket: WebSocket,
    token: Optional[str] = None,
    mode: str = SessionMode.INTERVIEW.value,
    interview_id: Optional[str] = None,
    feedback_id: Optional[str] = None,
    db: Session = Depends(get_db),
    scorer: TranscriptScorer = Depends(get_transcript_scorer),
):
    user = get_user_from_token(token, db)
    if user is None:
        logger.warning("Session rejected: invalid or missing token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        session_mode = SessionMode(mode)
    except ValueError:
        logger.warning(f"Session rejected: unknown mode {mode!r}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    questions: list[str] = []
    if session_mode is SessionMode.INTERVIEW:
        interview = get_interview(db, interview_id)
        if interview is None:
            logger.warning(f"Session rejected: interview {interview_id!r} not found")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        questions = list(interview.questions)

    await websocket.accept()

    context = SessionContext(
        user_name=user.full_name,
        user_id=user.id,
        interview_id=interview_id,
        feedback_id=feedback_id,
        questions=questions,
    )

    async def handle_feedback(interview_id: str, user_id: str, transcript: list[SavedMessage], feedback_id: Optional[str]):
        return await run_in_threadpool(
            create_feedback,
            db,
            interview_id,
            user_id,
            [message.to_dict() for message in transcript],
            feedback_id,
            scorer,
        )

    session = InterviewSession(
        client=WebSocketVoiceClient(websocket),
        feedback_handler=handle_feedback,
        notify=websocket.send_json,
    )

    async def read_client():
        try:
            while True:
                try:
                    item = parse_event(await websocket.receive_json())
                except (ValueError, TypeError) as e:
                    # covers invalid JSON and pydantic ValidationError
                    logger.warning(f"Ignoring malformed session message: {e}")
                    continue

                if isinstance(item, ClientAction):
                    if item.action == "start":
                        session.submit(StartCall(mode=session_mode, context=context))
                    else:
                        session.submit(Disconnect())
                else:
                    session.submit(item)
        except WebSocketDisconnect:
            logger.info(f"Session socket closed by client: user_id={user.id}")
            session.submit(ChannelClosed())
        except Exception as e:
            logger.error(f"Session reader failed: {e}", exc_info=True)
            session.submit(ChannelClosed())

    reader = asyncio.create_task(read_client())
    try:
        await session.run()
    finally:
        reader.cancel()

    logger.info(
        f"Session ended: user_id={user.id}, mode={session_mode.value}, "
        f"messages={len(session.messages)}, redirect={session.redirect_to}"
    )
    try:
        await websocket.close()
    except RuntimeError:
        logger.debug("Session socket already closed")
