from __future__ import annotations
import argparse, json, logging, sys
from pathlib import Path

from pydantic import ValidationError

from .bitsource import BitSource
from .codecs.base import target_name
from .dispatch import bit_size, record_fields
from .errors import BitDataError
from .models.schema import SchemaDocument


def _is_file(text: str) -> bool:
    try:
        return Path(text).is_file()
    except OSError:  # e.g. a long literal taken for a file name
        return False


def _read_input(args) -> BitSource:
    if args.format == "bin":
        from .reader import to_source
        return to_source(args.input, args.bit_length)

    text = args.input
    if _is_file(text):
        text = Path(text).read_text(encoding="utf-8")
    if args.format == "hex":
        src = BitSource.from_bytes(bytes.fromhex(text.strip().removeprefix("0x")))
    else:
        src = BitSource.from_string(text)
    if args.bit_length is not None:
        src = BitSource(src.to_bytes(), args.bit_length)
    return src


def cmd_decode(args):
    doc = SchemaDocument.load(args.schema)
    root = doc.root_type(args.root)
    src = _read_input(args)

    if args.all:
        from .reader import iter_parse
        out = [r.model_dump(mode="json") for r in iter_parse(root, src, start=args.start)]
        print(json.dumps(out, indent=2))
        return 0

    from .reader import parse
    result = parse(root, src, start=args.start)
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0


def cmd_info(args):
    doc = SchemaDocument.load(args.schema)
    classes = doc.compile()
    for name, cls in classes.items():
        size = bit_size(cls)
        print(f"{name}: {'variable' if size is None else f'{size} bits'}")
        for f in record_fields(cls):
            fsize = bit_size(f.target)
            shown = "variable" if fsize is None else str(fsize)
            print(f"  {f.name:<20} {target_name(f.target):<30} {shown}")
    return 0


def cmd_plot(args):
    from .viz import plot_bits
    src = _read_input(args)
    plot_bits(src, start=args.start, end=args.end, width=args.width)
    return 0


def _add_input_args(sp):
    sp.add_argument("input", help="Path to a binary file, or hex / 0-1 text (see --format)")
    sp.add_argument("--format", default="bin", choices=["bin", "hex", "bits"],
                    help="How to read INPUT: raw bytes from a file, hex digits, or 0/1 characters")
    sp.add_argument("--bit-length", type=int, default=None, help="Use only the first N bits of the input")
    sp.add_argument("--start", type=int, default=0, help="Bit offset to start decoding at")


def build_parser():
    p = argparse.ArgumentParser(prog="bitdata", description="Bit-level record decoding")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("decode", help="decode INPUT with a JSON schema and print the result as JSON")
    sp.add_argument("schema", help="Path to a schema document (or inline JSON)")
    _add_input_args(sp)
    sp.add_argument("--root", default=None, help="Record to decode (defaults to the schema's root)")
    sp.add_argument("--all", action="store_true", help="Decode records back to back until the input ends")
    sp.set_defaults(func=cmd_decode)

    sp = sub.add_parser("info", help="list the records of a schema with their static sizes")
    sp.add_argument("schema")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("plot", help="show the input bits as a grid")
    _add_input_args(sp)
    sp.add_argument("--end", type=int, default=None, help="End of the highlighted window (bits)")
    sp.add_argument("--width", type=int, default=64, help="Bits per row")
    sp.set_defaults(func=cmd_plot)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    if ns.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return ns.func(ns)
    except (BitDataError, ValidationError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
