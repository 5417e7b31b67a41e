"""
Raw record -> typed Message.

Dispatch is table-driven on the `type` tag. Unknown message or block tags
raise ArgumentError; nested tool_result content never raises and keeps
unrecognized items as plain dicts.
"""

from typing import Any, Callable, Mapping, Optional, Union, get_args

from pydantic import ValidationError

from claude_stream.errors import ArgumentError
from claude_stream.models.messages import (
    AssistantMessage,
    ContentBlock,
    Message,
    ResultMessage,
    StreamEvent,
    SystemMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)


def _text_block(raw: Mapping[str, Any]) -> TextBlock:
    return TextBlock(text=raw.get("text") or "")


def _thinking_block(raw: Mapping[str, Any]) -> ThinkingBlock:
    return ThinkingBlock(thinking=raw.get("thinking") or "", signature=raw.get("signature") or "")


def _tool_use_block(raw: Mapping[str, Any]) -> ToolUseBlock:
    tool_input = raw.get("input")
    if tool_input is None:
        tool_input = {}
    if not isinstance(tool_input, Mapping):
        raise ArgumentError(f"tool_use input must be an object, got {type(tool_input).__name__}", dict(raw))
    return ToolUseBlock(id=raw.get("id") or "", name=raw.get("name") or "", input=dict(tool_input))


def _tool_result_block(raw: Mapping[str, Any]) -> ToolResultBlock:
    return ToolResultBlock(
        tool_use_id=raw.get("tool_use_id") or "",
        content=parse_nested_content(raw.get("content")),
        is_error=raw.get("is_error"),
    )


BLOCK_PARSERS: dict[str, tuple[type, Callable[[Mapping[str, Any]], Any]]] = {
    "text": (TextBlock, _text_block),
    "thinking": (ThinkingBlock, _thinking_block),
    "tool_use": (ToolUseBlock, _tool_use_block),
    "tool_result": (ToolResultBlock, _tool_result_block),
}


def parse_content_block(raw: Any) -> ContentBlock:
    """Parse one content block; unknown or missing `type` raises ArgumentError."""
    if not isinstance(raw, Mapping):
        raise ArgumentError(f"Content block must be an object, got {type(raw).__name__}")
    block_type = raw.get("type")
    entry = BLOCK_PARSERS.get(block_type)  # type: ignore[arg-type]
    if entry is None:
        raise ArgumentError(f"Unknown content block type: {block_type!r}", dict(raw))
    return _build(entry[1], raw, f"{block_type} block")


def parse_nested_content(raw: Any) -> Union[str, list[Any], None]:
    """Best-effort parse of tool_result / user content.

    Strings pass through, lists are parsed item by item (recognized block
    shapes become typed blocks, anything else is kept as-is), other values
    resolve to None.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        items: list[Any] = []
        for item in raw:
            if isinstance(item, Mapping) and item.get("type") in BLOCK_PARSERS:
                try:
                    items.append(parse_content_block(item))
                    continue
                except ValueError:
                    pass
            items.append(item)
        return items
    return None


def parse_content_value(raw: Any) -> Union[str, list[ContentBlock], None]:
    """Strict variant used for assistant content: every element must be a known block."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return [parse_content_block(item) for item in raw]
    raise ArgumentError(f"Unsupported content value: {type(raw).__name__}")


def _message_body(data: Mapping[str, Any]) -> Mapping[str, Any]:
    message = data.get("message")
    if message is None:
        return {}
    if not isinstance(message, Mapping):
        raise ArgumentError(f"{data.get('type')} message body must be an object", dict(data))
    return message


def _user(data: Mapping[str, Any]) -> UserMessage:
    message = _message_body(data)
    return UserMessage(
        content=parse_nested_content(message.get("content")),
        parent_tool_use_id=data.get("parent_tool_use_id"),
    )


def _assistant(data: Mapping[str, Any]) -> AssistantMessage:
    message = _message_body(data)
    content = message.get("content")
    if content is None:
        content = []
    if not isinstance(content, list):
        raise ArgumentError("assistant message.content must be a list", dict(data))
    return AssistantMessage(
        model=message.get("model") or "",
        content=[parse_content_block(block) for block in content],
        parent_tool_use_id=data.get("parent_tool_use_id"),
        error=data.get("error"),
    )


def _system(data: Mapping[str, Any]) -> SystemMessage:
    payload = data.get("data")
    if not isinstance(payload, Mapping):
        payload = {k: v for k, v in data.items() if k not in ("type", "subtype")}
    return SystemMessage(subtype=data.get("subtype") or "", data=dict(payload))


def _result(data: Mapping[str, Any]) -> ResultMessage:
    return ResultMessage(
        subtype=data.get("subtype") or "",
        duration_ms=data.get("duration_ms") or 0,
        duration_api_ms=data.get("duration_api_ms") or 0,
        is_error=data.get("is_error") or False,
        num_turns=data.get("num_turns") or 0,
        session_id=data.get("session_id") or "",
        total_cost_usd=data.get("total_cost_usd"),
        usage=data.get("usage"),
        result=data.get("result"),
        structured_output=data.get("structured_output"),
    )


def _stream_event(data: Mapping[str, Any]) -> StreamEvent:
    return StreamEvent(
        uuid=data.get("uuid") or "",
        session_id=data.get("session_id") or "",
        event=data.get("event"),
        parent_tool_use_id=data.get("parent_tool_use_id"),
    )


MESSAGE_PARSERS: dict[str, tuple[type, Callable[[Mapping[str, Any]], Any]]] = {
    "user": (UserMessage, _user),
    "assistant": (AssistantMessage, _assistant),
    "system": (SystemMessage, _system),
    "result": (ResultMessage, _result),
    "stream": (StreamEvent, _stream_event),
    "stream_event": (StreamEvent, _stream_event),
}


def parse_message(data: Optional[Mapping[str, Any]]) -> Message:
    """Parse one decoded frame into its Message variant.

    Raises ArgumentError when `type` is missing or unrecognized, when a
    content block inside an assistant message has an unknown type, or when a
    known record has wrongly shaped fields.
    """
    if not isinstance(data, Mapping):
        raise ArgumentError(f"Message must be an object, got {type(data).__name__}")
    if "type" not in data:
        raise ArgumentError("Message missing type field", dict(data))
    message_type = data["type"]
    entry = MESSAGE_PARSERS.get(message_type)
    if entry is None:
        raise ArgumentError(f"Unknown message type: {message_type!r}", dict(data))
    return _build(entry[1], data, f"{message_type} message")


def _build(builder: Callable[[Mapping[str, Any]], Any], raw: Mapping[str, Any], what: str) -> Any:
    try:
        return builder(raw)
    except ValidationError as e:
        raise ArgumentError(f"Malformed {what}: {e.error_count()} invalid field(s)", {"errors": e.errors()}) from e
    except (TypeError, AttributeError) as e:
        raise ArgumentError(f"Malformed {what}: {e}", dict(raw)) from e


def _check_exhaustive() -> None:
    for union, table in ((ContentBlock, BLOCK_PARSERS), (Message, MESSAGE_PARSERS)):
        handled = {cls for cls, _ in table.values()}
        missing = set(get_args(union)) - handled
        if missing:
            names = ", ".join(sorted(cls.__name__ for cls in missing))
            raise TypeError(f"No parser registered for: {names}")


_check_exhaustive()
