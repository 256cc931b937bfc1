"""Local clipboard access through pyperclip.

The peer only needs two primitives: read the current clipboard text and
replace it. Both run in a worker thread because pyperclip shells out to
platform tools (xclip, pbcopy, ...) and blocks. Clipboard failures are
never fatal: a failed read looks like an empty clipboard and a failed write
is reported as False so the caller can skip recording it.
"""

from __future__ import annotations

import asyncio
import logging

import pyperclip

logger = logging.getLogger(__name__)


def _paste() -> str:
    text = pyperclip.paste()
    if not isinstance(text, str):
        return ""
    return text


async def read_clipboard_text() -> str:
    """Read the local clipboard text.

    Returns:
        Clipboard text, or "" if the clipboard is empty, holds non-text
        content, or cannot be read or decoded.
    """
    try:
        return await asyncio.to_thread(_paste)
    except (pyperclip.PyperclipException, OSError, UnicodeError) as e:
        logger.debug("Clipboard read failed: %s", e)
        return ""


async def write_clipboard_text(text: str) -> bool:
    """Replace the local clipboard text.

    Args:
        text: Text to place on the clipboard.

    Returns:
        True on success, False if the clipboard could not be written.
    """
    try:
        await asyncio.to_thread(pyperclip.copy, text)
    except (pyperclip.PyperclipException, OSError, UnicodeError) as e:
        logger.debug("Clipboard write failed: %s", e)
        return False
    return True
