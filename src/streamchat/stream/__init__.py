"""Streaming response consumption.

Module structure:
- decoder.py: incremental UTF-8 decoding of byte chunks
- tee.py: non-destructive fan-out of one byte stream
- response.py: cloneable streaming response
- tap.py: raw stream tap for the debug view
- buffer.py: raw text buffer
- protocol.py: SSE framing and UI message stream chunks
"""

from .buffer import DebugBufferSink
from .decoder import ChunkDecoder
from .protocol import (
    SSEDecoder,
    StreamChunk,
    UIMessageStreamReader,
    encode_chunk,
    encode_done,
)
from .response import ChatResponse
from .tap import StreamTap
from .tee import BodyBranch, BodyTee

__all__ = [
    "BodyBranch",
    "BodyTee",
    "ChatResponse",
    "ChunkDecoder",
    "DebugBufferSink",
    "SSEDecoder",
    "StreamChunk",
    "StreamTap",
    "UIMessageStreamReader",
    "encode_chunk",
    "encode_done",
]
