"""Unit tests for incremental chunk decoding."""
from hypothesis import given
from hypothesis import strategies as st

from streamchat.stream.decoder import REPLACEMENT_CHAR, ChunkDecoder


class TestChunkDecoder:
    """Tests for ChunkDecoder."""

    def test_ascii_passes_through(self):
        decoder = ChunkDecoder()
        assert decoder.feed(b"hello") == "hello"
        assert decoder.flush() == ""

    def test_two_byte_sequence_split_across_chunks(self):
        """The first byte of a split character is held back, not emitted as garbage."""
        decoder = ChunkDecoder()

        assert decoder.feed(b"caf\xc3") == "caf"
        assert decoder.pending
        assert decoder.feed(b"\xa9") == "é"
        assert not decoder.pending

    def test_four_byte_sequence_split_byte_by_byte(self):
        decoder = ChunkDecoder()
        encoded = "\U0001f600".encode("utf-8")

        pieces = [decoder.feed(encoded[i:i + 1]) for i in range(len(encoded))]

        assert pieces[:-1] == ["", "", ""]
        assert pieces[-1] == "\U0001f600"

    def test_truncated_sequence_at_end_becomes_replacement_char(self):
        decoder = ChunkDecoder()

        assert decoder.feed(b"ok\xe2\x82") == "ok"
        assert decoder.flush() == REPLACEMENT_CHAR
        assert not decoder.pending

    def test_malformed_bytes_do_not_raise(self):
        decoder = ChunkDecoder()
        assert decoder.feed(b"a\xffb") == f"a{REPLACEMENT_CHAR}b"

    def test_empty_chunk_is_ignored(self):
        decoder = ChunkDecoder()
        assert decoder.feed(b"") == ""

    def test_flush_resets_state(self):
        decoder = ChunkDecoder()
        decoder.feed(b"\xc3")
        decoder.flush()
        assert decoder.feed(b"x") == "x"

    @given(
        st.text(),
        st.lists(st.integers(min_value=0, max_value=200), max_size=10),
    )
    def test_any_split_decodes_to_original_text(self, text: str, cuts: list[int]):
        """Property test: concatenated output equals the text however bytes are chunked."""
        data = text.encode("utf-8")
        points = sorted({min(c, len(data)) for c in cuts})
        bounds = [0, *points, len(data)]

        decoder = ChunkDecoder()
        out = "".join(decoder.feed(data[a:b]) for a, b in zip(bounds, bounds[1:]))
        out += decoder.flush()

        assert out == text
