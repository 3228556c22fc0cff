from __future__ import annotations
from enum import StrEnum
from typing import NamedTuple, Self
import struct

from cardpng.crc import chunk_crc


PNG_SIGNATURE = bytes.fromhex("89504E470D0A1A0A")

# length + type + crc
CHUNK_OVERHEAD = 12


class CarrierKeyword(StrEnum):
    CHARA = "chara"
    CCV3 = "ccv3"

    @classmethod
    def lookup(cls, keyword: str) -> CarrierKeyword | None:
        try:
            return cls(keyword)
        except ValueError:
            return None


class Chunk:
    length: int
    chunk_type: bytes
    chunk_data: bytes | memoryview
    crc: int
    start: int
    end: int

    def __init__(
        self,
        length: int,
        chunk_type: bytes,
        chunk_data: bytes | memoryview,
        crc: int,
        start: int = 0,
        end: int = 0,
    ) -> None:
        self.length = length
        self.chunk_type = chunk_type
        self.chunk_data = chunk_data
        self.crc = crc
        self.start = start
        self.end = end

    def __bytes__(self) -> bytes:
        l = struct.pack(">I", self.length)
        ct = struct.pack(">4s", self.chunk_type)
        crc = struct.pack(">I", self.crc)
        return b"".join([l, ct, self.chunk_data, crc])

    def __repr__(self) -> str:
        return (
            f"Chunk(type={self.type_name!r}, length={self.length}, "
            f"crc=0x{self.crc:08X}, span=({self.start}, {self.end}))"
        )

    @property
    def type_name(self) -> str:
        return self.chunk_type.decode("ascii", errors="replace")

    @property
    def span(self) -> tuple[int, int]:
        return self.start, self.end

    @property
    def crc_ok(self) -> bool:
        return self.crc == Chunk.calc_crc(self.chunk_data, self.chunk_type)

    @classmethod
    def build(cls, chunk_type: bytes, chunk_data: bytes) -> Self:
        """
        Creates a new chunk with the length and CRC fields computed from the payload.
        The span is left at (0, 0) since the chunk does not come from any buffer yet.
        """
        return cls(len(chunk_data), chunk_type, chunk_data, Chunk.calc_crc(chunk_data, chunk_type))

    @staticmethod
    def calc_crc(chunk_data, chunk_type) -> int:
        return chunk_crc(chunk_type, chunk_data)


class TextChunk(NamedTuple):
    keyword: str
    text: bytes

    def __bytes__(self) -> bytes:
        return b"".join([self.keyword.encode("latin-1"), b"\x00", self.text])

    @classmethod
    def from_bytes(cls, data: bytes | memoryview) -> Self | None:
        """
        Splits a tEXt payload at the first NUL into keyword and text.
        Payloads without a separator, or with an empty keyword, are not text records.
        """
        data = bytes(data)
        null_idx = data.find(b"\x00")
        if null_idx <= 0:
            return None

        return cls(
            keyword=data[:null_idx].decode("latin-1"),
            text=data[null_idx + 1 :],
        )

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> Self | None:
        if chunk.chunk_type != b"tEXt":
            return None
        return cls.from_bytes(chunk.chunk_data)

    @property
    def carrier(self) -> CarrierKeyword | None:
        return CarrierKeyword.lookup(self.keyword)

    def to_chunk(self) -> Chunk:
        return Chunk.build(b"tEXt", bytes(self))
