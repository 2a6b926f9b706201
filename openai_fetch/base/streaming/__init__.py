"""Streaming package: SSE frame decoder and the lazy chunk sequence."""

from .decoder import DecoderState, StreamChunkDecoder, frame_payload
from .chunk_stream import ChunkStream

__all__ = [
    "DecoderState",
    "StreamChunkDecoder",
    "frame_payload",
    "ChunkStream",
]
