#!/usr/bin/env python3
"""
Name: csvcut
Description: select columns from each row of a CSV file
License: perl
"""

import sys
import io
import os
import argparse
import re
import csv
from dataclasses import dataclass

# Tokens are separated by runs of whitespace or by a comma with optional
# whitespace around it.
COLUMN_SEPARATOR = re.compile(r'\s*,\s*|\s+')


class FieldSpecError(ValueError):
    """Raised for a malformed -f list."""


class RaggedRowError(ValueError):
    """Raised when a row's width differs from the first row's."""


class ColumnRangeError(ValueError):
    """Raised when a selected column does not exist in a row."""


@dataclass(frozen=True)
class CutConfig:
    infile: str
    fields: tuple = ()
    delimiter: str = ','


def _column_number(text: str, token: str) -> int:
    if not re.fullmatch(r'[0-9]+', text):
        raise FieldSpecError(f"invalid field list '{token}'")
    num = int(text)
    if num == 0:
        raise FieldSpecError("fields are numbered from 1")
    return num


def parse_field_spec(spec: str) -> list:
    """
    Parses a cut-style field list (e.g. "1,3-5 -2") into zero-based indices.

    Order and duplicates are kept as given, so "2,1,1" selects the second
    column followed by the first column twice. A range with no start ("-3")
    begins at column 1. A range with no end ("3-") is rejected rather than
    running to the end of the row.
    """
    indices = []
    if not spec or not spec.strip():
        return indices

    tokens = COLUMN_SEPARATOR.split(spec.strip())
    # Only a leading or trailing separator may leave an empty token.
    if not tokens[0]: tokens = tokens[1:]
    if tokens and not tokens[-1]: tokens = tokens[:-1]

    for token in tokens:
        if not token:
            raise FieldSpecError(f"invalid field list '{spec}'")

        if '-' in token:
            parts = token.split('-')
            if len(parts) > 2:
                raise FieldSpecError(f"unexpected range format '{token}'")
            start_str, end_str = parts

            if not end_str:
                raise FieldSpecError(f"empty ending ranges are not supported '{token}'")

            start = _column_number(start_str, token) if start_str else 1
            finish = _column_number(end_str, token)
            # A decreasing range such as "5-3" selects nothing.
            indices.extend(range(start - 1, finish))
        else:
            indices.append(_column_number(token, token) - 1)

    return indices


def cut_rows(rows, fields):
    """Yields each row projected onto the selected column indices."""
    width = None
    for row_num, row in enumerate(rows, start=1):
        if not row: continue # Blank lines are not records

        if width is None:
            width = len(row)
        elif len(row) != width:
            raise RaggedRowError(
                f"row {row_num}: wrong number of fields (expected {width}, got {len(row)})")

        out_row = []
        for idx in fields:
            if idx >= len(row):
                raise ColumnRangeError(
                    f"row {row_num}: column index out of range for row "
                    f"(column {idx + 1}, row has {len(row)})")
            out_row.append(row[idx])
        yield out_row


def cut_csv(config: CutConfig, out):
    """Reads config.infile as CSV and writes the selected columns to out."""
    writer = csv.writer(out, delimiter=config.delimiter, lineterminator='\n')

    if config.infile == '-':
        # Re-open stdin untranslated so quoted fields keep embedded newlines.
        stdin = io.TextIOWrapper(sys.stdin.buffer, newline='')
        try:
            reader = csv.reader(stdin, delimiter=config.delimiter)
            writer.writerows(cut_rows(reader, config.fields))
        finally:
            stdin.detach()
    else:
        with open(config.infile, 'r', newline='') as fh:
            reader = csv.reader(fh, delimiter=config.delimiter)
            writer.writerows(cut_rows(reader, config.fields))

    out.flush()


def build_config(args) -> CutConfig:
    """Turns parsed arguments into a CutConfig, parsing the field list."""
    # A bare filename after the options wins over --in.
    infile = args.file or args.infile
    return CutConfig(
        infile=infile,
        fields=tuple(parse_field_spec(args.field_list)),
        delimiter=args.delimiter,
    )


def main(argv=None):
    """Parses arguments and runs the column selection."""
    parser = argparse.ArgumentParser(
        description="Select columns from each row of a CSV file.",
        usage="%(prog)s [--in file] [-f list] [-d delim] [file]"
    )
    parser.add_argument('--in', dest='infile',
                        help="CSV file to read, or '-' for stdin.")
    parser.add_argument('-f', dest='field_list', default='',
                        help='The list of fields to output, e.g. "1,3-5,-2".')
    parser.add_argument('-d', '--delimiter', default=',',
                        help='Use DELIM instead of a comma for reading and writing.')
    parser.add_argument('file', nargs='?',
                        help='CSV file to read; overrides --in.')

    args = parser.parse_args(argv)
    program_name = os.path.basename(sys.argv[0])

    if not (args.file or args.infile or '').strip():
        parser.error("--in is a required parameter")
    if len(args.delimiter) != 1:
        parser.error("the delimiter must be a single character")

    try:
        config = build_config(args)
        cut_csv(config, sys.stdout)
    except (ValueError, csv.Error) as e:
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
