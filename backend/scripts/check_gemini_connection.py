"""
NoteWise - Gemini Connection Check
==================================

What:  Sends one trivial prompt to Gemini with the configured key and model.
How:   GeminiService.test_connection(); exit code 0 when text came back,
       1 otherwise (missing key, rejected key, network failure, empty reply).

Usage (from backend/):
    python scripts/check_gemini_connection.py
"""

import asyncio
import logging
import sys

from notewise.config import settings
from notewise.services.gemini_service import gemini_service

logger = logging.getLogger("notewise.scripts.check_gemini_connection")


async def main() -> int:
    if not settings.has_gemini_api_key:
        logger.error("GEMINI_API_KEY is not set; nothing to check.")
        return 1

    logger.info("Checking Gemini model %s...", gemini_service.model)
    if await gemini_service.test_connection():
        logger.info("Gemini connection OK")
        return 0

    logger.error("Gemini connection failed; see the warning above for the cause.")
    return 1


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    sys.exit(asyncio.run(main()))
