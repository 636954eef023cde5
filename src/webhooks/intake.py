"""Raw request body capture.

The body is collected as bytes, chunk by chunk, and never decoded to text:
any transcoding before verification changes the bytes the HMAC was computed
over.
"""

from __future__ import annotations

from typing import AsyncIterable


async def capture_raw_body(stream: AsyncIterable[bytes]) -> bytes:
    """Concatenate a binary body stream into the exact bytes transmitted.

    Errors raised by the stream propagate; a partial body is never returned.
    """
    chunks: list[bytes] = []
    async for chunk in stream:
        if not isinstance(chunk, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected a binary chunk, got {type(chunk).__name__}")
        chunks.append(bytes(chunk))
    return b"".join(chunks)
