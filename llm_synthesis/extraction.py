"""Normalisation of heterogeneous text-generation results.

Text-generation backends return strings, dicts, or lists of either,
depending on backend and version. This module reduces all of them to a
single string so nothing past the adapter boundary sees raw shapes.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def _text_of(item: Any) -> str | None:
    """Return the text carried by one candidate item, if any."""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in ("generated_text", "text"):
            value = item.get(key)
            if isinstance(value, str):
                return value
    return None


def extract_generated_text(result: Any) -> str:
    """Extract the first generated text from a backend result.

    Recognised shapes:
        - ``"text"``
        - ``{"generated_text": "text"}``
        - ``{"generated_text": ["text" | {"text": "text"}, ...]}``
        - ``{"text": "text"}``
        - ``{"sequences": [{"text": "text"}, ...]}``
        - ``["text", ...]``
        - ``[{"generated_text": "text"} | {"text": "text"}, ...]``

    Args:
        result: Raw backend output.

    Returns:
        The extracted text, or ``""`` when no shape matches. Callers treat
        ``""`` as "use the fallback template".
    """
    if isinstance(result, str):
        return result

    if isinstance(result, dict):
        generated = result.get("generated_text")
        if isinstance(generated, str):
            return generated
        if isinstance(generated, list) and generated:
            return _text_of(generated[0]) or ""

        text = result.get("text")
        if isinstance(text, str):
            return text

        sequences = result.get("sequences")
        if isinstance(sequences, list) and sequences:
            return _text_of(sequences[0]) or ""

    if isinstance(result, (list, tuple)) and result:
        extracted = _text_of(result[0])
        if extracted is not None:
            return extracted

    logger.warning("Could not extract generated text from result of type %s", type(result).__name__)
    return ""
