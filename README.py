"""
PORTFOLIO-CHAT — System Documentation
=====================================

This module-style README documents the architecture, components, data flow,
and operational practices of the portfolio chat assistant. It can be
imported to inspect sections programmatically or run to print them.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.
- Import `README` in tools or scripts to surface sections.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Backend Components
4. Data & Persistence
5. Turn Lifecycle
6. Configuration & Environment
7. Testing Strategy
8. Troubleshooting

"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{textwrap.dedent(body).strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    PORTFOLIO-CHAT answers visitors' questions about one person's portfolio.
    Every answer is grounded on a knowledge context compiled from the
    portfolio database (profile, skills, experience, education, projects,
    certificates) and sent to Google Gemini together with the recent
    conversation and a fixed set of answering rules.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    - Backend: FastAPI app exposing `/api/chat`, `/api/chat/history`,
      `/api/admin/knowledge/invalidate` and `/health`.
    - Pipeline: RecordReader -> ContextCompiler -> ContextCache ->
      PromptBuilder -> GenerationClient, orchestrated by Controller.
    - Storage: SQLAlchemy (SQLite by default) for portfolio records;
      in-memory or Redis for conversation history.
    """,
)


BACKEND_COMPONENTS = section(
    "3. Backend Components",
    """
    - `app/records.py`: reads every collection concurrently; all or nothing.
    - `app/context_compiler.py`: deterministic text rendering of the records.
    - `app/context_cache.py`: builds the context once per process, until invalidated.
    - `app/session.py`: bounded conversation history per session.
    - `app/prompt_builder.py`: context, history, rules, question, in that order.
    - `app/generate.py`: Gemini `generateContent` call with fixed sampling.
    - `app/controller.py`: one chat turn; never raises to the caller.
    - `app/main.py`: composition root and HTTP routes.
    """,
)


DATA_AND_PERSISTENCE = section(
    "4. Data & Persistence",
    """
    - Tables: profile_facts, skills, experience, education, projects, certificates.
    - Every table has a `visible` flag; hidden rows never reach the model.
    - Seed an empty database: `python -m portfolio_chat.data.populate_db`.
    - Inspect the compiled context: `python -m portfolio_chat.scripts.inspect_context`.
    - After editing records, POST `/api/admin/knowledge/invalidate`.
    """,
)


TURN_LIFECYCLE = section(
    "5. Turn Lifecycle",
    """
    IDLE -> WARMING -> ASSEMBLING -> INVOKING -> RECORDING -> IDLE

    - WARMING: the knowledge context is built if the cache is cold.
    - ASSEMBLING: the user turn is recorded, then the prompt is built from
      the prior turns. If it is too large, the oldest turns are dropped.
    - INVOKING: one Gemini call, no retries.
    - RECORDING: the assistant turn is recorded.
    - Failures return `{"success": false, "error": <kind>, "message": <friendly text>}`.
      The user turn stays in history.
    """,
)


CONFIGURATION = section(
    "6. Configuration & Environment",
    """
    Set in `.env` or the environment:
    - GEMINI_API_KEY, GEMINI_MODEL, GEMINI_TEMPERATURE, GEMINI_TOP_P, GEMINI_TOP_K
    - DATABASE_URL
    - CONVERSATION_BACKEND=memory|redis, REDIS_HOST, REDIS_PORT, REDIS_DB
    - OWNER_NAME, MAX_CONVERSATION_TURNS, HISTORY_WINDOW, MAX_PROMPT_CHARS
    - LOG_LEVEL
    """,
)


TESTING = section(
    "7. Testing Strategy",
    """
    - `python -m pytest tests -v`
    - Gemini calls are patched; the SQL source uses a temporary SQLite file.
    """,
)


TROUBLESHOOTING = section(
    "8. Troubleshooting",
    """
    - `inference_unavailable` on every turn: check GEMINI_API_KEY.
    - `data_source_error`: the database is unreachable or tables are missing;
      the next turn retries automatically.
    - Stale answers after editing records: call the invalidate endpoint.
    """,
)


ALL_SECTIONS = [
    SYSTEM_OVERVIEW,
    ARCHITECTURE,
    BACKEND_COMPONENTS,
    DATA_AND_PERSISTENCE,
    TURN_LIFECYCLE,
    CONFIGURATION,
    TESTING,
    TROUBLESHOOTING,
]


if __name__ == "__main__":
    print(__doc__)
    for s in ALL_SECTIONS:
        print(s)
