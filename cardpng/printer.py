from typing import Iterable

from cardpng.chunks import Chunk, TextChunk


class Printer:
    ESC = "\x1B"
    CSI = f"{ESC}["

    CRITICAL = (110, 170, 255)
    ANCILLARY = (160, 160, 160)
    CARD = (255, 190, 60)
    BAD = (255, 80, 80)
    GOOD = (90, 220, 120)

    @classmethod
    def paint(cls, s: str, r: int, g: int, b: int) -> str:
        return "".join(
            [
                f"{cls.CSI}38;2;{r};{g};{b}m",
                s,
                f"{cls.CSI}0m",
            ]
        )

    def __init__(self, colour: bool = True, preview_len: int = 40):
        self.colour = colour
        self.preview_len = preview_len

    def apply_rgb(self, s: str, rgb: tuple[int, int, int]) -> str:
        if not self.colour:
            return s
        return self.paint(s, *rgb)

    def chunk_colour(self, chunk: Chunk) -> tuple[int, int, int]:
        text_chunk = TextChunk.from_chunk(chunk)
        if text_chunk is not None and text_chunk.carrier is not None:
            return self.CARD
        # Bit 5 of the first type byte is clear for critical chunks
        if chunk.chunk_type[0] & 0x20 == 0:
            return self.CRITICAL
        return self.ANCILLARY

    def describe(self, chunk: Chunk) -> str:
        text_chunk = TextChunk.from_chunk(chunk)
        if text_chunk is None:
            return ""
        preview = text_chunk.text[: self.preview_len].decode("latin-1")
        if len(text_chunk.text) > self.preview_len:
            preview += "..."
        return f"{text_chunk.keyword}={preview}"

    def format_row(self, i: int, chunk: Chunk) -> str:
        type_name = self.apply_rgb(chunk.type_name, self.chunk_colour(chunk))
        if chunk.crc_ok:
            crc = self.apply_rgb(f"0x{chunk.crc:08X}", self.GOOD)
        else:
            crc = self.apply_rgb(f"0x{chunk.crc:08X}!", self.BAD)
        return "\t".join(
            [f"{i:>3d}", type_name, f"{chunk.start:>8d}-{chunk.end:<8d}", f"{chunk.length:>8d}", crc, self.describe(chunk)]
        ).rstrip()

    def print(self, chunks: Iterable[Chunk]):
        print("\t".join(["  #", "type", "span".center(17), "  length", "crc"]))
        for i, chunk in enumerate(chunks):
            print(self.format_row(i, chunk))
