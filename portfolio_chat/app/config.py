#!/usr/bin/env python3
"""
Configuration management for the portfolio chat backend.
"""

import os
from dotenv import load_dotenv

from ..utils.logger import get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger()


def _optional_float(name: str):
    raw = os.getenv(name)
    return float(raw) if raw else None


class Config:
    """Configuration class for the application."""

    # Gemini (Google) API Configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")

    # Sampling parameters are fixed for the lifetime of the generation client
    GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", 0.3))
    GEMINI_TOP_P = float(os.getenv("GEMINI_TOP_P", 0.8))
    GEMINI_TOP_K = int(os.getenv("GEMINI_TOP_K", 40))
    GEMINI_MAX_OUTPUT_TOKENS = int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", 800))
    # No timeout unless explicitly configured; callers own the deadline
    GEMINI_REQUEST_TIMEOUT = _optional_float("GEMINI_REQUEST_TIMEOUT")

    # Portfolio database
    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(os.path.dirname(__file__), "..", "data", "portfolio.db"),
    )

    # Conversation storage (memory|redis)
    CONVERSATION_BACKEND = os.getenv("CONVERSATION_BACKEND", "memory").lower()
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB = int(os.getenv("REDIS_DB", 0))

    # Application Configuration
    OWNER_NAME = os.getenv("OWNER_NAME", "the portfolio owner")
    MAX_CONVERSATION_TURNS = int(os.getenv("MAX_CONVERSATION_TURNS", 10))
    HISTORY_WINDOW = int(os.getenv("HISTORY_WINDOW", 10))
    MAX_PROMPT_CHARS = int(os.getenv("MAX_PROMPT_CHARS", 30000))
    RECORD_READER_WORKERS = int(os.getenv("RECORD_READER_WORKERS", 6))

    @classmethod
    def debug_print(cls):
        logger.info(f"[CONFIG] GEMINI_MODEL={cls.GEMINI_MODEL} set={bool(cls.GEMINI_API_KEY)}")
        logger.info(
            f"[CONFIG] sampling temperature={cls.GEMINI_TEMPERATURE} "
            f"top_p={cls.GEMINI_TOP_P} top_k={cls.GEMINI_TOP_K}"
        )
        logger.info(f"[CONFIG] CONVERSATION_BACKEND={cls.CONVERSATION_BACKEND}")
        logger.info(
            f"[CONFIG] MAX_CONVERSATION_TURNS={cls.MAX_CONVERSATION_TURNS} "
            f"HISTORY_WINDOW={cls.HISTORY_WINDOW} MAX_PROMPT_CHARS={cls.MAX_PROMPT_CHARS}"
        )

    @classmethod
    def validate(cls):
        """Validate that the numeric configuration makes sense.

        A missing GEMINI_API_KEY is not an error here: it is reported on each
        chat turn instead of preventing the process from starting.
        """
        problems = []

        if cls.MAX_CONVERSATION_TURNS < 2:
            problems.append("MAX_CONVERSATION_TURNS must be at least 2")
        if cls.HISTORY_WINDOW < 0:
            problems.append("HISTORY_WINDOW must not be negative")
        if cls.MAX_PROMPT_CHARS <= 0:
            problems.append("MAX_PROMPT_CHARS must be positive")
        if not 0.0 <= cls.GEMINI_TEMPERATURE <= 2.0:
            problems.append("GEMINI_TEMPERATURE must be between 0 and 2")
        if not 0.0 < cls.GEMINI_TOP_P <= 1.0:
            problems.append("GEMINI_TOP_P must be in (0, 1]")
        if cls.GEMINI_TOP_K < 1:
            problems.append("GEMINI_TOP_K must be at least 1")
        if cls.CONVERSATION_BACKEND not in ("memory", "redis"):
            problems.append("CONVERSATION_BACKEND must be 'memory' or 'redis'")

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")

        return True

# Validate configuration on import
Config.validate()
