#!/usr/bin/env python3
"""
Quick Start Guide for xml2csv.

Walks through converting a small record-oriented document, inspecting the
columns it produces, and tuning the output. Run after ``pip install -e .``.
"""

import io

from xml2csv import ConverterConfig, XMLTableConverter, convert
from xml2csv.tools import format_tree

CONTACTS = b"""<?xml version="1.0" encoding="UTF-8"?>
<contacts xmlns:meta="urn:example:meta">
  <contact>
    <name>Ada</name>
    <phone>555-0100</phone>
    <phone>555-0101</phone>
    <address><city>London</city><zip>N1</zip></address>
    <meta:note>None</meta:note>
  </contact>
  <contact>
    <name>Grace "Amazing" Hopper</name>
    <phone>555-0200</phone>
    <address><city>Arlington</city></address>
    <meta:note></meta:note>
  </contact>
</contacts>
"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("QUICK START - xml2csv")
    print("=" * 45)

    # Step 1: Convert with defaults
    print("\nStep 1: Converting")
    print("-" * 30)
    result = convert(CONTACTS)
    print(result.to_text())

    # Step 2: Inspect columns
    print("Step 2: Columns")
    print("-" * 30)
    print(f"Columns:   {', '.join(result.columns)}")
    print(f"Discarded: {', '.join(result.discarded_tags) or '(none)'}")
    print(f"Rows:      {result.row_count}")

    # Step 3: Look at the reconstructed tree
    print("\nStep 3: Tree")
    print("-" * 30)
    print(format_tree(result.root, show_columns=True))

    # Step 4: Tune the output
    print("\nStep 4: Keep every column, tab-separated")
    print("-" * 30)
    config = ConverterConfig.keep_all_columns().override(render__delimiter="\t")
    output = io.StringIO()
    XMLTableConverter(config).write(CONTACTS, output)
    print(output.getvalue())


if __name__ == "__main__":
    quick_start_example()
