#!/usr/bin/env python3
"""
Inspect the portfolio database: print every visible record and the knowledge
context the chatbot would be grounded on.

Usage:
  python -m portfolio_chat.scripts.inspect_context [--context-only]

Notes:
- Uses the existing SQLAlchemy session and models.
- Safe read-only inspection; makes no writes.
"""

from __future__ import annotations

import argparse

from portfolio_chat.app.config import Config
from portfolio_chat.app.context_compiler import ContextCompiler
from portfolio_chat.app.records import RecordReader, SqlRecordSource
from portfolio_chat.data.database import SessionLocal


def line(ch: str = "-", width: int = 60) -> str:
    return ch * width


def print_records(records):
    for name, rows in records.model_dump().items():
        print(line("="))
        print(f"{name} ({len(rows)})")
        print(line("="))
        for row in rows:
            print(f"- {row}")
        print()


def main():
    parser = argparse.ArgumentParser(description="Print the compiled knowledge context")
    parser.add_argument("--context-only", action="store_true", help="skip the raw record listing")
    args = parser.parse_args()

    records = RecordReader(SqlRecordSource(SessionLocal)).fetch_all_records()
    if not args.context_only:
        print_records(records)

    context = ContextCompiler(owner_name=Config.OWNER_NAME).compile(records)
    print(line("="))
    print(f"Knowledge context ({len(context)} chars, limit {Config.MAX_PROMPT_CHARS})")
    print(line("="))
    print(context)


if __name__ == "__main__":
    main()
