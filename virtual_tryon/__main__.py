"""Run a try-on from the command line.

    python -m virtual_tryon photos/me.jpg garments/shirt.jpg --category upper_body
"""

import argparse
import asyncio
import sys
from pathlib import Path

from virtual_tryon.images import decode_data_uri, to_image_input
from virtual_tryon.models import DEFAULT_CATEGORY, GARMENT_CATEGORIES
from virtual_tryon.service import generate_tryon


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="virtual_tryon", description=__doc__.splitlines()[0])
    parser.add_argument("user_photo", help="Local path or URL of the person photo")
    parser.add_argument("clothing_photo", help="Local path or URL of the garment photo")
    parser.add_argument("--description", default=None, help="Short garment description")
    parser.add_argument("--category", choices=GARMENT_CATEGORIES, default=DEFAULT_CATEGORY)
    parser.add_argument("--output", type=Path, default=Path("tryon_result.png"))
    return parser


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    print("Running IDM-VTON try-on...")
    print(f"Human image:   {args.user_photo}")
    print(f"Garment image: {args.clothing_photo}")

    try:
        user_photo = to_image_input(args.user_photo)
        clothing_photo = to_image_input(args.clothing_photo)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = await generate_tryon(
        user_photo,
        clothing_photo,
        garment_description=args.description,
        category=args.category,
    )
    if not result.success or not result.image:
        print(f"Error: {result.error or 'No image returned'}", file=sys.stderr)
        if result.details:
            print(f"Details: {result.details}", file=sys.stderr)
        return 1

    try:
        _, content = decode_data_uri(result.image)
    except ValueError as e:
        print(f"Error: could not decode returned image: {e}", file=sys.stderr)
        return 1
    args.output.write_bytes(content)
    print(f"{result.message} --> {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
