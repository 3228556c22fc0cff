import struct
import zlib


def crc32(data: bytes) -> int:
    return zlib.crc32(data)


def chunk_crc(chunk_type: bytes, chunk_data: bytes) -> int:
    """
    CRC of a chunk, computed over the type tag followed by the payload.
    The length field is not covered.
    """
    return zlib.crc32(chunk_data, zlib.crc32(struct.pack(">4s", chunk_type)))
