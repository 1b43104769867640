from fastapi import FastAPI, HTTPException, Request
from pathlib import Path
import os

app = FastAPI(title="Mock Completion Server", version="1.0.0")
# Canned replies: <reply>.txt under DATA_DIR, picked with the MOCK_COMPLETION_REPLY env var
DATA_DIR = Path(os.environ.get("MOCK_COMPLETION_DIR", Path(__file__).resolve().parent / "replies"))

@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/v1/messages")
async def create_message(request: Request):
    body = await request.json()
    reply = os.environ.get("MOCK_COMPLETION_REPLY", "fenced")
    file = DATA_DIR / f"{reply}.txt"
    if not file.exists():
        raise HTTPException(status_code=500, detail="reply not found")
    return {
        "id": "msg_mock",
        "type": "message",
        "role": "assistant",
        "model": body.get("model", "mock"),
        "content": [{"type": "text", "text": file.read_text()}],
        "stop_reason": "end_turn",
    }
