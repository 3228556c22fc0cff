"""Command line front end for reading and writing character cards in PNG files.

Usage:
    cardpng chunks FILE
    cardpng extract FILE [-o OUT] [--normalize]
    cardpng embed IMAGE CARD -o OUT [--no-chara] [--no-ccv3] [--normalize] [--convert]
    cardpng strip FILE -o OUT

Exit status is 0 on success, 1 when no card is found and 2 on a usage error or when the file cannot be
read or rewritten.
"""

from __future__ import annotations
from io import BytesIO
from pathlib import Path
import argparse
import logging
import sys

from PIL import Image, UnidentifiedImageError

from cardpng.card import card_to_json, normalize_imported_card, parse_card_json
from cardpng.codec import EmbedOptions, embed, extract, strip
from cardpng.errors import CardPngError
from cardpng.printer import Printer
from cardpng.walker import ChunkWalker, has_signature

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def convert_to_png(image_bytes: bytes) -> bytes:
    """Re-saves any image Pillow can open as an RGBA PNG. PNG input is returned untouched."""
    if has_signature(image_bytes):
        return image_bytes

    out = BytesIO()
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            logger.debug("Converting %s image to PNG", img.format)
            img.convert("RGBA").save(out, format="PNG")
    except UnidentifiedImageError as e:
        raise CardPngError(f"Cannot convert image to PNG: {e}") from e

    return out.getvalue()


def _cmd_chunks(args: argparse.Namespace) -> int:
    data = Path(args.file).read_bytes()
    if not has_signature(data):
        print(f"{args.file}: not a PNG", file=sys.stderr)
        return EXIT_ERROR

    walker = ChunkWalker(data)
    Printer(colour=sys.stdout.isatty() and not args.no_colour).print(walker)
    if not walker.saw_iend:
        print(f"warning: stream ended at offset {walker.offset} without IEND", file=sys.stderr)
    return EXIT_OK


def _cmd_extract(args: argparse.Namespace) -> int:
    found = extract(Path(args.file).read_bytes(), verify_crc=args.verify_crc)
    if found is None:
        print(f"{args.file}: no character card found", file=sys.stderr)
        return EXIT_NOT_FOUND

    json_text = found.json_text
    if args.normalize:
        json_text = card_to_json(normalize_imported_card(parse_card_json(json_text)))

    if args.output:
        Path(args.output).write_text(json_text, encoding="utf-8")
        print(f"Wrote {found.keyword} card to {args.output}")
    else:
        print(json_text)
    return EXIT_OK


def _cmd_embed(args: argparse.Namespace) -> int:
    image_bytes = Path(args.image).read_bytes()
    if args.convert:
        image_bytes = convert_to_png(image_bytes)

    json_text = Path(args.card).read_text(encoding="utf-8")
    if args.normalize:
        json_text = card_to_json(normalize_imported_card(parse_card_json(json_text)))

    options = EmbedOptions(write_chara=not args.no_chara, write_ccv3=not args.no_ccv3)
    out = embed(image_bytes, json_text, options)
    Path(args.output).write_bytes(out)
    print(f"Wrote {len(out)} bytes to {args.output} ({', '.join(options.keywords) or 'no card'})")
    return EXIT_OK


def _cmd_strip(args: argparse.Namespace) -> int:
    out = strip(Path(args.file).read_bytes())
    Path(args.output).write_bytes(out)
    print(f"Wrote {len(out)} bytes to {args.output}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="cardpng", description="Character cards in PNG tEXt chunks")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log chunk level detail")
    subparsers = parser.add_subparsers(dest="command")

    p_chunks = subparsers.add_parser("chunks", help="List the chunks of a PNG file")
    p_chunks.add_argument("file")
    p_chunks.add_argument("--no-colour", action="store_true")

    p_extract = subparsers.add_parser("extract", help="Print the card JSON embedded in a PNG")
    p_extract.add_argument("file")
    p_extract.add_argument("-o", "--output", default="")
    p_extract.add_argument("--normalize", action="store_true", help="Fill in a complete chara_card_v3 document")
    p_extract.add_argument("--verify-crc", action="store_true", help="Fail on chunks with a bad checksum")

    p_embed = subparsers.add_parser("embed", help="Write card JSON into a PNG")
    p_embed.add_argument("image")
    p_embed.add_argument("card", help="Path to the card JSON file")
    p_embed.add_argument("-o", "--output", required=True)
    p_embed.add_argument("--no-chara", action="store_true")
    p_embed.add_argument("--no-ccv3", action="store_true")
    p_embed.add_argument("--normalize", action="store_true")
    p_embed.add_argument("--convert", action="store_true", help="Convert non-PNG images to PNG first")

    p_strip = subparsers.add_parser("strip", help="Remove embedded cards from a PNG")
    p_strip.add_argument("file")
    p_strip.add_argument("-o", "--output", required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "chunks": _cmd_chunks,
        "extract": _cmd_extract,
        "embed": _cmd_embed,
        "strip": _cmd_strip,
    }
    handler = commands.get(args.command)
    if not handler:
        parser.print_help()
        return EXIT_ERROR

    try:
        return handler(args)
    except (CardPngError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
