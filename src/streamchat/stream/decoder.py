"""Incremental UTF-8 decoding of response chunks.

Hides how multi-byte sequences split across chunk boundaries are handled.
"""

import codecs

REPLACEMENT_CHAR = "\ufffd"


class ChunkDecoder:
    """Stateful UTF-8 decoder for a single byte stream.

    A trailing incomplete multi-byte sequence is held back and completed by
    the next ``feed``. Malformed bytes never raise; they decode to U+FFFD.

    Usage:
        decoder = ChunkDecoder()
        text = decoder.feed(b"caf\\xc3")   # "caf"
        text += decoder.feed(b"\\xa9")     # "é"
        text += decoder.flush()
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def feed(self, data: bytes) -> str:
        """Decode one chunk, buffering an incomplete trailing sequence."""
        if not data:
            return ""
        return self._decoder.decode(data, final=False)

    def flush(self) -> str:
        """Emit whatever is still buffered and reset the decoder.

        A truncated sequence left over at the true end of the stream comes
        out as a single U+FFFD rather than being dropped.
        """
        tail = self._decoder.decode(b"", final=True)
        self._decoder.reset()
        return tail

    @property
    def pending(self) -> bool:
        """Whether bytes of an incomplete sequence are held back."""
        buffered, _ = self._decoder.getstate()
        return bool(buffered)
