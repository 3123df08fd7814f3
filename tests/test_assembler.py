"""Unit tests for message models and the part assembler."""
import pytest

from streamchat.messages.assembler import MessagePartAssembler, PartEvent
from streamchat.messages.models import (
    FlatMessage,
    GenericPart,
    Message,
    ReasoningPart,
    Role,
    StructuredMessage,
    TextPart,
    ToolCallPart,
    parse_part,
    parse_wire_message,
)


class TestParseWireMessage:
    """Tests for resolving the two wire shapes."""

    def test_parts_list_is_structured(self):
        wire = parse_wire_message({"id": "m1", "role": "user", "parts": [{"type": "text", "text": "hi"}]})

        assert isinstance(wire, StructuredMessage)
        message = wire.to_message()
        assert message.id == "m1"
        assert message.parts == [TextPart(text="hi")]

    def test_content_string_is_flat(self):
        wire = parse_wire_message({"role": "assistant", "content": "hello"})

        assert isinstance(wire, FlatMessage)
        assert wire.to_message().text == "hello"

    def test_content_list_is_joined(self):
        wire = parse_wire_message({"role": "user", "content": [{"type": "text", "text": "a"}, "b"]})
        assert wire.to_message().text == "ab"

    def test_unknown_role_defaults_to_assistant(self):
        assert parse_wire_message({"role": "robot", "content": "x"}).role is Role.ASSISTANT

    def test_unknown_part_type_is_kept_generic(self):
        part = parse_part({"type": "file", "url": "https://example.com/a.png"})

        assert isinstance(part, GenericPart)
        assert part.payload == {"url": "https://example.com/a.png"}

    def test_tool_part_accepts_wire_aliases(self):
        part = parse_part({"type": "tool-call", "toolCallId": "c1", "toolName": "calc", "input": {"x": 1}})

        assert isinstance(part, ToolCallPart)
        assert part.tool_call_id == "c1"

    def test_round_trip_through_wire_shape(self):
        message = Message(id="m", role=Role.ASSISTANT, parts=[ReasoningPart(text="r"), TextPart(text="t")])
        assert parse_wire_message(message.to_wire()).to_message() == message


class TestMessagePartAssembler:
    """Tests for MessagePartAssembler."""

    def test_consecutive_deltas_merge_into_one_part(self):
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m", "text", delta="Hel"))
        assembler.apply_event(PartEvent("m", "text", delta="lo"))

        [message] = assembler.render()
        assert message.parts == [TextPart(text="Hello")]
        assert message.role is Role.ASSISTANT

    def test_type_switch_opens_new_part(self):
        """reasoning "a", text "b", reasoning "c" gives three parts in that order."""
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m", "reasoning", delta="a"))
        assembler.apply_event(PartEvent("m", "text", delta="b"))
        assembler.apply_event(PartEvent("m", "reasoning", delta="c"))

        [message] = assembler.render()
        assert message.parts == [ReasoningPart(text="a"), TextPart(text="b"), ReasoningPart(text="c")]

    def test_part_index_targets_existing_part(self):
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m", "reasoning", delta="a"))
        assembler.apply_event(PartEvent("m", "text", delta="b"))
        assembler.apply_event(PartEvent("m", "reasoning", delta="a2", part_index=0))

        assert assembler.get("m").parts[0] == ReasoningPart(text="aa2")

    def test_boundary_event_without_delta_is_a_no_op(self):
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m", "text"))

        assert assembler.get("m").parts == []

    def test_complete_part_is_appended(self):
        assembler = MessagePartAssembler()
        part = ToolCallPart(tool_call_id="c", tool_name="t")
        assembler.apply_event(PartEvent("m", part.type, part=part))

        assert assembler.get("m").parts == [part]

    def test_render_orders_transcript_before_in_progress(self):
        assembler = MessagePartAssembler()
        assembler.add_message(Message.user("Hi", message_id="u1"))
        assembler.apply_event(PartEvent("a1", "text", delta="Hello"))

        assert [m.id for m in assembler.render()] == ["u1", "a1"]
        assert [m.id for m in assembler.transcript] == ["u1"]
        assert [m.id for m in assembler.in_progress] == ["a1"]

    def test_finalized_message_ignores_late_events(self):
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m", "text", delta="done"))
        assembler.finalize("m")
        assembler.apply_event(PartEvent("m", "text", delta=" more"))

        assert assembler.is_finalized("m")
        assert assembler.get("m").text == "done"

    def test_start_message_on_finalized_id_fails(self):
        assembler = MessagePartAssembler()
        assembler.add_message(Message.user("x", message_id="u"))

        with pytest.raises(ValueError):
            assembler.start_message("u")

    def test_duplicate_add_fails(self):
        assembler = MessagePartAssembler()
        assembler.add_message(Message.user("x", message_id="u"))

        with pytest.raises(ValueError):
            assembler.add_message(Message.user("y", message_id="u"))

    def test_finalize_unknown_id_is_a_no_op(self):
        assert MessagePartAssembler().finalize("missing") is None

    def test_discard_drops_partial_message(self):
        assembler = MessagePartAssembler()
        assembler.apply_event(PartEvent("m", "text", delta="partial"))
        assembler.discard("m")

        assert assembler.render() == []

    def test_regenerate_replaces_in_place(self):
        assembler = MessagePartAssembler()
        assembler.add_message(Message.user("q", message_id="u"))
        assembler.apply_event(PartEvent("a", "text", delta="old"))
        assembler.finalize("a")
        assembler.add_message(Message.user("q2", message_id="u2"))

        replacement = Message(id="a2", role=Role.ASSISTANT, parts=[TextPart(text="new")])
        assembler.regenerate("a", replacement)

        assert [m.id for m in assembler.render()] == ["u", "a2", "u2"]
        assert assembler.is_finalized("a2")
        assert not assembler.is_finalized("a")

    def test_regenerate_unknown_id_fails(self):
        with pytest.raises(KeyError):
            MessagePartAssembler().regenerate("nope", Message.user("x"))

    def test_ingest_resolves_both_shapes(self):
        assembler = MessagePartAssembler()
        assembler.ingest({"id": "1", "role": "user", "content": "flat"})
        assembler.ingest({"id": "2", "role": "assistant", "parts": [{"type": "text", "text": "structured"}]})

        assert [m.text for m in assembler.render()] == ["flat", "structured"]

    def test_clear(self):
        assembler = MessagePartAssembler()
        assembler.add_message(Message.user("x", message_id="u"))
        assembler.clear()

        assert assembler.render() == []
        assert not assembler.is_finalized("u")
