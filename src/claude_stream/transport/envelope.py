"""
Envelope construction and frame encoding.
"""

import json
from typing import Any

from claude_stream.models.envelope import UserContent, UserEnvelope


def build_envelope(prompt: str, session_id: str = "default") -> dict[str, Any]:
    """Build the outbound user record for one prompt."""
    envelope = UserEnvelope(message=UserContent(content=prompt), session_id=session_id)
    return envelope.model_dump()


def encode_frame(record: dict[str, Any]) -> str:
    """One JSON object, newline-terminated."""
    return json.dumps(record, ensure_ascii=False, separators=(",", ":")) + "\n"
