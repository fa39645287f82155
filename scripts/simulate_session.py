"""
Play a scripted voice call against a running server.

Stands in for the browser: sends start, answers the relayed start command
with call-start, replays a transcript, ends the call and prints the outcome.

Run: python -m scripts.simulate_session <token> <interview_id> [ws://127.0.0.1:8000]
"""
import json
import sys

import websocket

SCRIPT = [
    ("assistant", "Hello! Thank you for taking the time to speak with me today."),
    ("user", "Thanks for having me. I'm a backend engineer with five years of experience."),
    ("assistant", "Tell me about a challenging bug you fixed."),
    ("user", "We had a race condition in our job queue. I added idempotency keys and the duplicates stopped."),
]


def simulate(token: str, interview_id: str, base_url: str = "ws://127.0.0.1:8000"):
    ws = websocket.WebSocket()
    ws.connect(f"{base_url}/ws/interview-session?token={token}&mode=interview&interview_id={interview_id}")
    print("✅ Connected to interview session")

    ws.send(json.dumps({"action": "start"}))

    while True:
        payload = json.loads(ws.recv())
        if payload.get("command") == "start":
            print("📞 Call start relayed, questions:")
            print(payload["variables"].get("questions", ""))
            break

    ws.send(json.dumps({"event": "call-start"}))
    for role, text in SCRIPT:
        # Interim fragment first, like the real SDK
        ws.send(json.dumps({"event": "message", "message": {
            "type": "transcript", "transcriptType": "partial", "role": role, "transcript": text[:10],
        }}))
        ws.send(json.dumps({"event": "message", "message": {
            "type": "transcript", "transcriptType": "final", "role": role, "transcript": text,
        }}))
    ws.send(json.dumps({"event": "call-end"}))

    while True:
        payload = json.loads(ws.recv())
        if payload.get("event") == "finished":
            print("🏁 Session finished:", payload)
            break

    ws.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    simulate(*sys.argv[1:4])
