"""Unit tests for the UI message stream protocol."""
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from streamchat.messages.models import ToolCallPart, ToolResultPart
from streamchat.stream.protocol import (
    DONE_SENTINEL,
    SSEDecoder,
    StreamChunk,
    UIMessageStreamReader,
    encode_chunk,
    encode_done,
)


class TestEncoding:
    """Tests for chunk framing."""

    def test_encode_chunk_uses_wire_aliases(self):
        chunk = StreamChunk(type="start", message_id="m1")
        assert encode_chunk(chunk) == 'data: {"type":"start","messageId":"m1"}\n\n'

    def test_encode_dict_keeps_unicode(self):
        framed = encode_chunk({"type": "text-delta", "id": "0", "delta": "héllo"})
        assert "héllo" in framed
        assert framed.endswith("\n\n")

    def test_encode_done(self):
        assert encode_done() == f"data: {DONE_SENTINEL}\n\n"


class TestSSEDecoder:
    """Tests for SSEDecoder."""

    def test_single_event(self):
        assert SSEDecoder().feed('data: {"a":1}\n\n') == ['{"a":1}']

    def test_event_split_inside_separator(self):
        decoder = SSEDecoder()
        assert decoder.feed('data: {"a":1}\n') == []
        assert decoder.feed('\ndata: {"b"') == ['{"a":1}']
        assert decoder.feed(":2}\n\n") == ['{"b":2}']

    def test_crlf_line_endings(self):
        assert SSEDecoder().feed("data: x\r\n\r\n") == ["x"]

    def test_comments_and_other_fields_are_ignored(self):
        decoder = SSEDecoder()
        assert decoder.feed(": keep-alive\n\n") == []
        assert decoder.feed("event: message\nid: 3\ndata: y\n\n") == ["y"]

    def test_multiline_data_is_joined(self):
        assert SSEDecoder().feed("data: a\ndata: b\n\n") == ["a\nb"]

    def test_flush_returns_unterminated_event(self):
        decoder = SSEDecoder()
        decoder.feed("data: tail")
        assert decoder.flush() == ["tail"]
        assert decoder.flush() == []

    @given(st.integers(min_value=0, max_value=60))
    def test_any_split_point_yields_same_events(self, cut: int):
        """Property test: where the text is cut never changes the events."""
        text = 'data: {"type":"text-delta","delta":"x"}\n\ndata: [DONE]\n\n'
        cut = min(cut, len(text))
        decoder = SSEDecoder()

        events = decoder.feed(text[:cut]) + decoder.feed(text[cut:])

        assert events == ['{"type":"text-delta","delta":"x"}', "[DONE]"]

    def test_crlf_separator_split_between_cr_and_lf(self):
        decoder = SSEDecoder()
        assert decoder.feed("data: a\r\n\r") == []
        assert decoder.feed("\ndata: b\r\n\r\n") == ["a", "b"]

    def test_flush_drops_held_back_carriage_return(self):
        decoder = SSEDecoder()
        decoder.feed("data: tail\r")
        assert decoder.flush() == ["tail"]

    @given(st.integers(min_value=0, max_value=80))
    def test_any_split_point_with_crlf_yields_same_events(self, cut: int):
        """Property test: CRLF framing survives a cut anywhere, even mid-CRLF."""
        text = 'data: {"type":"text-delta","delta":"x"}\r\n\r\ndata: [DONE]\r\n\r\n'
        cut = min(cut, len(text))
        decoder = SSEDecoder()

        events = decoder.feed(text[:cut]) + decoder.feed(text[cut:]) + decoder.flush()

        assert events == ['{"type":"text-delta","delta":"x"}', "[DONE]"]


def _events(*chunks: dict) -> str:
    return "".join(encode_chunk(c) for c in chunks)


class TestUIMessageStreamReader:
    """Tests for UIMessageStreamReader."""

    def test_text_deltas_become_part_events(self):
        reader = UIMessageStreamReader("local")
        events = reader.feed(_events(
            {"type": "start", "messageId": "srv"},
            {"type": "text-start", "id": "0"},
            {"type": "text-delta", "id": "0", "delta": "Hel"},
            {"type": "text-delta", "id": "0", "delta": "lo"},
            {"type": "text-end", "id": "0"},
        ))

        assert reader.started
        assert reader.message_id == "srv"
        assert [(e.message_id, e.part_type, e.delta) for e in events] == [
            ("srv", "text", "Hel"),
            ("srv", "text", "lo"),
        ]

    def test_start_after_content_keeps_message_id(self):
        reader = UIMessageStreamReader("local")
        reader.feed(_events({"type": "text-delta", "id": "0", "delta": "x"}))
        reader.feed(_events({"type": "start", "messageId": "late"}))

        assert reader.message_id == "local"

    def test_reasoning_deltas(self):
        reader = UIMessageStreamReader("m")
        events = reader.feed(_events({"type": "reasoning-delta", "id": "0", "delta": "hmm"}))
        assert events[0].part_type == "reasoning"
        assert events[0].delta == "hmm"

    def test_tool_chunks_become_complete_parts(self):
        reader = UIMessageStreamReader("m")
        events = reader.feed(_events(
            {"type": "tool-input-available", "toolCallId": "c1", "toolName": "search", "input": {"q": "x"}},
            {"type": "tool-output-available", "toolCallId": "c1", "output": [1, 2]},
        ))

        call, result = events[0].part, events[1].part
        assert isinstance(call, ToolCallPart)
        assert call.tool_name == "search"
        assert call.input == {"q": "x"}
        assert isinstance(result, ToolResultPart)
        assert result.output == [1, 2]

    def test_finish_records_reason_and_metadata(self):
        reader = UIMessageStreamReader("m")
        usage = {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7}
        reader.feed(_events({"type": "finish", "finishReason": "stop", "messageMetadata": {"usage": usage}}))
        reader.feed(encode_done())

        assert reader.finished
        assert reader.finish_reason == "stop"
        assert reader.metadata["usage"] == usage
        assert reader.done

    def test_error_chunk_sets_error_text(self):
        reader = UIMessageStreamReader("m")
        reader.feed(_events({"type": "error", "errorText": "Request timeout (60s)"}))
        assert reader.error_text == "Request timeout (60s)"

    def test_malformed_json_is_skipped(self):
        reader = UIMessageStreamReader("m")
        events = reader.feed("data: {not json\n\n" + _events({"type": "text-delta", "delta": "ok"}))

        assert [e.delta for e in events] == ["ok"]

    @pytest.mark.parametrize("chunk_type", ["start-step", "finish-step", "text-start", "reasoning-end", "source-url"])
    def test_structural_and_unknown_chunks_produce_no_events(self, chunk_type: str):
        reader = UIMessageStreamReader("m")
        assert reader.feed(f"data: {json.dumps({'type': chunk_type})}\n\n") == []

    def test_flush_handles_unterminated_last_event(self):
        reader = UIMessageStreamReader("m")
        assert reader.feed('data: {"type":"text-delta","delta":"z"}') == []
        events = reader.flush()
        assert [e.delta for e in events] == ["z"]

    def test_deltas_survive_crlf_split_across_chunks(self):
        reader = UIMessageStreamReader("m")
        events = reader.feed('data: {"type":"text-delta","delta":"a"}\r\n\r')
        events += reader.feed('\ndata: {"type":"text-delta","delta":"b"}\r\n\r\n')
        events += reader.flush()

        assert [e.delta for e in events] == ["a", "b"]
