from io import BytesIO
import struct
import zlib

from PIL import Image, PngImagePlugin
import pytest

PNG_SIGNATURE = bytes.fromhex("89504E470D0A1A0A")


def raw_chunk(chunk_type: bytes, chunk_data: bytes, crc: int | None = None) -> bytes:
    if crc is None:
        crc = zlib.crc32(chunk_type + chunk_data) & 0xFFFFFFFF
    return struct.pack(">I4s", len(chunk_data), chunk_type) + chunk_data + struct.pack(">I", crc)


def text_chunk(keyword: str, text: bytes) -> bytes:
    return raw_chunk(b"tEXt", keyword.encode("latin-1") + b"\x00" + text)


def ihdr_chunk(width: int = 1, height: int = 1) -> bytes:
    return raw_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0))


def idat_chunk(width: int = 1, height: int = 1) -> bytes:
    scanline = b"\x00" + b"\xff\x00\x00\xff" * width
    return raw_chunk(b"IDAT", zlib.compress(scanline * height))


def iend_chunk() -> bytes:
    return raw_chunk(b"IEND", b"")


def build_png(*middle: bytes) -> bytes:
    return b"".join([PNG_SIGNATURE, ihdr_chunk(), *middle, idat_chunk(), iend_chunk()])


@pytest.fixture
def minimal_png() -> bytes:
    return build_png()


@pytest.fixture
def pillow_png() -> bytes:
    img = Image.new("RGBA", (4, 3), (0, 128, 255, 255))
    info = PngImagePlugin.PngInfo()
    info.add_text("Comment", "made with pillow")
    buf = BytesIO()
    img.save(buf, format="PNG", pnginfo=info)
    return buf.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (2, 2), (10, 20, 30)).save(buf, format="JPEG")
    return buf.getvalue()
