from __future__ import annotations
from typing import NamedTuple
import base64
import binascii
import logging

from cardpng.chunks import PNG_SIGNATURE, CarrierKeyword, Chunk, TextChunk
from cardpng.errors import CardDecodeError, NotAPng, TruncatedPng
from cardpng.walker import ChunkWalker, has_signature

logger = logging.getLogger(__name__)


class ExtractedCard(NamedTuple):
    keyword: CarrierKeyword
    json_text: str


class EmbedOptions(NamedTuple):
    write_chara: bool = True
    write_ccv3: bool = True

    @property
    def keywords(self) -> list[CarrierKeyword]:
        # chara always goes first when both are written
        keywords = []
        if self.write_chara:
            keywords.append(CarrierKeyword.CHARA)
        if self.write_ccv3:
            keywords.append(CarrierKeyword.CCV3)
        return keywords


def encode_payload(json_text: str) -> bytes:
    return base64.b64encode(json_text.encode("utf-8"))


def decode_payload(text: bytes) -> str:
    """
    Reverses encode_payload. The stored text must be ASCII base64 wrapping UTF-8 bytes.
    Whitespace is ignored and missing "=" padding is restored.

    Raises:
        CardDecodeError: The text is not ASCII, not valid base64, or does not decode to UTF-8.
    """
    try:
        b64 = "".join(text.decode("ascii").split())
        b64 += "=" * (-len(b64) % 4)
        raw = base64.b64decode(b64, validate=True)
    except (UnicodeDecodeError, binascii.Error) as e:
        raise CardDecodeError(f"Card payload is not valid base64: {e}") from e

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CardDecodeError(f"Card payload is not valid UTF-8: {e}") from e


def carrier_chunks(png_bytes: bytes, verify_crc: bool = False):
    """
    Yields (chunk, text_chunk) for every tEXt chunk keyed chara or ccv3, in file order.
    Nothing is yielded for data without the PNG signature.
    """
    if not has_signature(png_bytes):
        logger.debug("No PNG signature, nothing to scan")
        return

    for chunk in ChunkWalker(png_bytes, verify_crc=verify_crc):
        text_chunk = TextChunk.from_chunk(chunk)
        if text_chunk is not None and text_chunk.carrier is not None:
            yield chunk, text_chunk


def extract(png_bytes: bytes, verify_crc: bool = False) -> ExtractedCard | None:
    """
    Finds the first chara or ccv3 tEXt chunk and decodes the card JSON it carries.

    Returns None when there is no such chunk, including when the data is not a PNG at all.

    Raises:
        CardDecodeError: The first matching chunk was found but its payload is corrupt.
            Later chunks are not tried.
        ChecksumMismatch: Only when verify_crc is set.
    """
    for chunk, text_chunk in carrier_chunks(png_bytes, verify_crc=verify_crc):
        logger.debug("Found %s card at offset %d", text_chunk.keyword, chunk.start)
        return ExtractedCard(text_chunk.carrier, decode_payload(text_chunk.text))

    return None


def list_cards(png_bytes: bytes, verify_crc: bool = False) -> list[ExtractedCard]:
    return [
        ExtractedCard(text_chunk.carrier, decode_payload(text_chunk.text))
        for _, text_chunk in carrier_chunks(png_bytes, verify_crc=verify_crc)
    ]


def build_card_chunks(json_text: str, options: EmbedOptions) -> list[Chunk]:
    payload64 = encode_payload(json_text)
    return [
        TextChunk(keyword.value, payload64).to_chunk()
        for keyword in options.keywords
    ]


def embed(png_bytes: bytes, json_text: str, options: EmbedOptions = EmbedOptions()) -> bytes:
    """
    Returns a new PNG datastream carrying json_text in a tEXt chunk for each requested keyword.

    Existing chara and ccv3 chunks are dropped, whichever keywords are requested, and the
    new chunks go in immediately before IEND. Every other chunk is copied byte for byte
    and keeps its position.

    Raises:
        NotAPng: The data does not start with the PNG signature.
        TruncatedPng: The datastream ends, or a chunk overruns it, before IEND.
    """
    if not has_signature(png_bytes):
        raise NotAPng()

    insertion_set = build_card_chunks(json_text, options)
    view = memoryview(png_bytes)
    parts: list[bytes | memoryview] = [PNG_SIGNATURE]

    walker = ChunkWalker(view)
    for chunk in walker:
        text_chunk = TextChunk.from_chunk(chunk)
        if text_chunk is not None and text_chunk.carrier is not None:
            logger.debug("Dropping old %s chunk at offset %d", text_chunk.keyword, chunk.start)
            continue

        if chunk.chunk_type == b"IEND":
            logger.debug("Inserting %d card chunk(s) at offset %d", len(insertion_set), chunk.start)
            parts.extend(bytes(c) for c in insertion_set)

        parts.append(view[chunk.start : chunk.end])

    if not walker.saw_iend:
        raise TruncatedPng(
            f"No IEND chunk found before offset {walker.offset} of {len(view)}; "
            "there is nowhere to insert the card."
        )

    return b"".join(parts)


def strip(png_bytes: bytes) -> bytes:
    """Removes every chara and ccv3 chunk, leaving the rest of the file as it was."""
    return embed(png_bytes, "", EmbedOptions(write_chara=False, write_ccv3=False))
