"""StreamingDecoder: frame boundaries and the buffer ceiling."""

import pytest

from claude_stream.errors import JSONDecodeError
from claude_stream.transport.decoder import DEFAULT_MAX_BUFFER_SIZE, StreamingDecoder


def record_chunks(total_length: int) -> list[str]:
    """Three chunks that concatenate to one JSON object of exactly total_length chars."""
    head, tail = '{"a":"', '"}'
    body = "x" * (total_length - len(head) - len(tail))
    return [head, body, tail]


class TestFraming:
    """Frames close when the buffer parses, not per chunk."""

    def test_single_line_record(self):
        decoder = StreamingDecoder()
        assert decoder.feed('{"type": "result"}') == {"type": "result"}
        assert decoder.pending == 0

    def test_record_split_across_chunks(self):
        decoder = StreamingDecoder()
        assert decoder.feed('{"type": "assistant",') is None
        assert decoder.feed('"message": {"content": []') is None
        assert decoder.pending > 0
        assert decoder.feed("}}") == {"type": "assistant", "message": {"content": []}}
        assert decoder.pending == 0

    def test_blank_chunks_skipped(self):
        decoder = StreamingDecoder()
        assert decoder.feed("") is None
        assert decoder.feed("   \n") is None
        assert decoder.pending == 0

    def test_chunks_are_stripped(self):
        decoder = StreamingDecoder()
        assert decoder.feed('  {"a": 1}  \n') == {"a": 1}

    def test_reset_discards_partial(self):
        decoder = StreamingDecoder()
        decoder.feed('{"a": ')
        decoder.reset()
        assert decoder.feed('{"b": 2}') == {"b": 2}

    def test_default_ceiling(self):
        assert StreamingDecoder().max_buffer_size == DEFAULT_MAX_BUFFER_SIZE == 1024 * 1024


class TestBufferCeiling:
    """Overflow raises JSONDecodeError and resynchronises."""

    def test_one_over_limit_raises(self):
        decoder = StreamingDecoder(max_buffer_size=100)
        head, body, tail = record_chunks(101)
        decoder.feed(head)
        decoder.feed(body)
        with pytest.raises(JSONDecodeError, match="100") as exc_info:
            decoder.feed(tail)
        assert exc_info.value.max_buffer_size == 100
        assert decoder.pending == 0

    def test_one_under_limit_decodes(self):
        decoder = StreamingDecoder(max_buffer_size=100)
        head, body, tail = record_chunks(99)
        assert decoder.feed(head) is None
        assert decoder.feed(body) is None
        assert decoder.feed(tail) == {"a": body}

    def test_recovers_after_overflow(self):
        decoder = StreamingDecoder(max_buffer_size=50)
        with pytest.raises(JSONDecodeError):
            decoder.feed('{"a": "' + "x" * 60)
        assert decoder.feed('{"ok": true}') == {"ok": True}


@pytest.mark.asyncio
async def test_decode_over_async_source():
    async def chunks():
        for chunk in ['{"n":', "1}", "", '{"n": 2}', "[1,", "2]"]:
            yield chunk

    values = [value async for value in StreamingDecoder().decode(chunks())]
    assert values == [{"n": 1}, {"n": 2}, [1, 2]]
