#!/usr/bin/env python3
# normalize_scan.py
import json
import logging
import sys

from consent_theater.errors import ConsentTheaterError
from consent_theater.ingestion import parse_json_bytes
from consent_theater.normalizer import normalize


def main():
    if len(sys.argv) != 2:
        print("Usage: normalize_scan.py <scan.json>", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(level=logging.WARNING)
    json_file = sys.argv[1]

    # --- 1. Read the scan file ---
    try:
        with open(json_file, 'rb') as f:
            raw_content = f.read()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        sys.exit(1)

    # --- 2. Parse and normalize (combined, pre-shaped or raw phone scan) ---
    try:
        scan_result = normalize(parse_json_bytes(raw_content))
    except ConsentTheaterError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # --- 3. Build Output ---
    print(json.dumps(scan_result.to_dict(), indent=2, ensure_ascii=False))


if __name__ == '__main__':
    main()
