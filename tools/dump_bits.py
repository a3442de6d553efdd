#!/usr/bin/env python3
import sys
from bitdata.reader import to_source

def main(path: str, width: int = 32, limit: int = 16):
    src = to_source(path)
    print(f"{path}: {len(src)} bits")
    text = str(src)
    for row in range(min(limit, (len(text) + width - 1) // width)):
        chunk = text[row * width:(row + 1) * width]
        groups = " ".join(chunk[i:i + 8] for i in range(0, len(chunk), 8))
        print(f"{row * width:8d}  {groups}")

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: dump_bits.py FILE [WIDTH]", file=sys.stderr)
        raise SystemExit(2)
    main(sys.argv[1], int(sys.argv[2]) if len(sys.argv) > 2 else 32)
