class CardPngError(ValueError):
    pass


class NotAPng(CardPngError):
    def __init__(self, message: str = "That's not a PNG: signature bytes do not match.") -> None:
        super().__init__(message)


class TruncatedPng(CardPngError):
    def __init__(self, message: str = "No IEND chunk was found before the data ran out.") -> None:
        super().__init__(message)


class CardDecodeError(CardPngError):
    pass


class ChecksumMismatch(CardPngError):
    def __init__(self, chunk_type: bytes, offset: int, expected: int, actual: int) -> None:
        self.chunk_type = chunk_type
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum Failed on chunk type {chunk_type!r} at offset {offset}: "
            f"stored 0x{expected:08X}, computed 0x{actual:08X}"
        )
