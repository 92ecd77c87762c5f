#!/usr/bin/env python3
"""
Name: subdoc
Description: report files whose content is contained in another file
License: perl

Reads every file named on the command line, orders them longest first and,
for each one, lists the shorter files whose entire content appears somewhere
inside it. With --json-key, each file is parsed as a JSON object and only the
value of that key is compared.
"""

import sys
import os
import argparse
import json
from dataclasses import dataclass

SUMMARY_FORMAT = "{length: 8d} {name}"
CONTAINED_INDENT = ' ' * 11


class ExtractError(ValueError):
    """Raised when a JSON key cannot be extracted from a file."""


@dataclass(frozen=True)
class SubdocConfig:
    files: tuple = ()
    json_key: str = None


@dataclass(frozen=True)
class FileRecord:
    name: str
    raw: bytes
    comparable: bytes


def extract_json_value(data: bytes, key: str, filename: str) -> bytes:
    """
    Returns the bytes of a top-level key of a JSON document.

    A string value gives its UTF-8 encoding; any other value gives its
    compact JSON text. Lone surrogates from \\ud800-style escapes are kept
    as their raw code units.
    """
    try:
        document = json.loads(data)
    except ValueError as e:
        raise ExtractError(f"error getting '{key}' from [{filename}]: {e}")

    if not isinstance(document, dict):
        raise ExtractError(f"error getting '{key}' from [{filename}]: not a JSON object")
    if key not in document:
        raise ExtractError(f"error getting '{key}' from [{filename}]: key not found")

    value = document[key]
    if isinstance(value, str):
        return value.encode('utf-8', 'surrogatepass')
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False).encode('utf-8', 'surrogatepass')


def load_files(config: SubdocConfig) -> list:
    """Reads every configured file into a FileRecord."""
    records = []
    for name in config.files:
        with open(name, 'rb') as fh:
            raw = fh.read()
        if config.json_key:
            comparable = extract_json_value(raw, config.json_key, name)
        else:
            comparable = raw
        records.append(FileRecord(name, raw, comparable))
    return records


def find_contained(records) -> list:
    """
    Orders records longest first and pairs each with the later records it
    contains.

    Returns a list of (record, [contained records]) in report order. Only
    later records are checked, so two identical files are reported once.
    Records of equal length keep their input order.
    """
    ordered = sorted(records, key=lambda r: len(r.comparable), reverse=True)
    result = []
    for i, container in enumerate(ordered):
        contained = [other for other in ordered[i + 1:]
                     if other.comparable in container.comparable]
        result.append((container, contained))
    return result


def report(pairs, json_key=None, out=None):
    """Writes the containment report."""
    for container, contained in pairs:
        line = SUMMARY_FORMAT.format(length=len(container.comparable), name=container.name)
        if json_key:
            line += f" ({json_key})"
        print(line, file=out)
        for record in contained:
            print(f"{CONTAINED_INDENT}{record.name}", file=out)


def run(config: SubdocConfig, out=None):
    """Loads, compares and reports; fewer than two files is a no-op."""
    if len(config.files) < 2:
        return
    records = load_files(config)
    report(find_contained(records), config.json_key, out)


def main(argv=None):
    """Parses arguments and runs the comparison."""
    parser = argparse.ArgumentParser(
        description="Report files whose whole content appears inside another file.",
        usage="%(prog)s [--json-key key] file ..."
    )
    parser.add_argument('--json-key', dest='json_key',
                        help='Compare only the value of this top-level JSON key.')
    parser.add_argument('files', nargs='*', help='Files to compare.')

    args = parser.parse_args(argv)
    program_name = os.path.basename(sys.argv[0])

    config = SubdocConfig(files=tuple(args.files), json_key=args.json_key or None)

    try:
        run(config, sys.stdout)
    except ExtractError as e:
        print(f"{program_name}: {e}", file=sys.stderr)
        sys.exit(1)
    except FileNotFoundError as e:
        print(f"{program_name}: '{e.filename}': {e.strerror}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"{program_name}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
