"""
Outbound user envelope: one per query() call.
"""

from typing import Literal, Optional

from pydantic import BaseModel


class UserContent(BaseModel):
    role: Literal["user"] = "user"
    content: str


class UserEnvelope(BaseModel):
    type: Literal["user"] = "user"
    message: UserContent
    session_id: str = "default"
    parent_tool_use_id: Optional[str] = None
