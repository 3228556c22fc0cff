from __future__ import annotations
from typing import Iterator
import logging
import struct

from cardpng.chunks import CHUNK_OVERHEAD, PNG_SIGNATURE, Chunk
from cardpng.errors import ChecksumMismatch

logger = logging.getLogger(__name__)


def has_signature(buf: bytes | bytearray | memoryview) -> bool:
    return bytes(buf[: len(PNG_SIGNATURE)]) == PNG_SIGNATURE


class ChunkWalker:
    """
    Single pass cursor over the chunks of a PNG datastream.

    The buffer must already be known to start with the PNG signature; walking begins
    straight after it. Payloads are handed out as memoryview slices of the source,
    nothing is copied.

    The walk ends after the IEND chunk, or silently as soon as a whole chunk
    (length, type, payload and CRC) no longer fits in the remaining bytes.
    Use saw_iend afterwards to tell the two apart.

    To walk again, make a new walker. A walker cannot be rewound.
    """

    def __init__(self, buf: bytes | bytearray | memoryview, verify_crc: bool = False) -> None:
        self.view = memoryview(buf)
        self.offset = len(PNG_SIGNATURE)
        self.verify_crc = verify_crc
        self.saw_iend = False
        self._done = False

    def __iter__(self) -> Iterator[Chunk]:
        return self

    def __next__(self) -> Chunk:
        chunk = self.next_chunk()
        if chunk is None:
            raise StopIteration
        return chunk

    @property
    def remaining(self) -> int:
        return len(self.view) - self.offset

    def next_chunk(self) -> Chunk | None:
        if self._done:
            return None

        if self.remaining < CHUNK_OVERHEAD:
            logger.debug("Stopping at offset %d: %d trailing bytes", self.offset, self.remaining)
            self._done = True
            return None

        start = self.offset
        chunk_length, chunk_type = struct.unpack_from(">I4s", self.view, start)

        if chunk_length + CHUNK_OVERHEAD > self.remaining:
            logger.debug(
                "Stopping at offset %d: %r declares %d bytes but only %d remain",
                start, chunk_type, chunk_length, self.remaining - CHUNK_OVERHEAD,
            )
            self._done = True
            return None

        data_start = start + 8
        data_end = data_start + chunk_length
        chunk_data = self.view[data_start:data_end]
        crc, = struct.unpack_from(">I", self.view, data_end)
        end = data_end + 4

        if self.verify_crc:
            self._validate_crc(chunk_type, chunk_data, crc, start)

        self.offset = end
        if chunk_type == b"IEND":
            self.saw_iend = True
            self._done = True

        return Chunk(chunk_length, chunk_type, chunk_data, crc, start, end)

    @staticmethod
    def _validate_crc(chunk_type: bytes, chunk_data: memoryview, expected_crc: int, offset: int):
        actual_crc = Chunk.calc_crc(chunk_data, chunk_type)
        if actual_crc != expected_crc:
            raise ChecksumMismatch(chunk_type, offset, expected_crc, actual_crc)


def walk_chunks(buf: bytes | bytearray | memoryview, verify_crc: bool = False) -> Iterator[Chunk]:
    return ChunkWalker(buf, verify_crc=verify_crc)
