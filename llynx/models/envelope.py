"""
Stream envelope model.

Every line relayed to the client is one JSON object of the shape
`{"message": {"content": "..."}, "done": bool}`. The raw text is kept so
lines coming from the local backend are forwarded byte-for-byte.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True)
class Envelope:
    """One normalized stream line."""

    raw: str
    content: Optional[str] = None
    done: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional[Envelope]:
        """
        Parse an upstream NDJSON line.

        Returns None for lines that are blank, not JSON, or not an object.
        """
        raw = line.strip()
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if not isinstance(payload, dict):
            return None

        content = None
        message = payload.get("message")
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            content = message["content"]
        return cls(raw=raw, content=content, done=payload.get("done") is True)

    @classmethod
    def build(cls, model: str, content: str, done: bool = False) -> Envelope:
        """Build an envelope for backends that do not speak NDJSON natively."""
        payload: dict[str, Any] = {
            "model": model,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "message": {"role": "assistant", "content": content},
            "done": done,
        }
        return cls(raw=json.dumps(payload, ensure_ascii=False), content=content, done=done)

    @staticmethod
    def error_line(message: str) -> str:
        """Terminal line sent when the upstream fails after streaming started."""
        return json.dumps({"error": message, "done": True}, ensure_ascii=False)
