from __future__ import annotations


def translate_key(event) -> str:
    """Map a Textual key event to the session's key names.

    Printable keys become their character (so ``C`` and ``/`` arrive as-is);
    everything else keeps Textual's name (``up``, ``pageup``, ``escape``...).
    """
    character = getattr(event, "character", None)
    if character and getattr(event, "is_printable", False):
        return character
    return event.key
