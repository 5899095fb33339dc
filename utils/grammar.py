import os
import logging

import requests

LANGUAGETOOL_URL = os.environ.get("LANGUAGETOOL_URL", "https://api.languagetool.org/v2/check")
LANGUAGETOOL_LANGUAGE = os.environ.get("LANGUAGETOOL_LANGUAGE", "en-US")
GRAMMAR_TIMEOUT = float(os.environ.get("QUESTLY_GRAMMAR_TIMEOUT", "15"))

logger = logging.getLogger("questly")


def _match_edit(match):
    """Return (start, length, replacement) for a LanguageTool match, or None."""
    if not isinstance(match, dict):
        return None
    replacements = match.get("replacements") or []
    first = replacements[0] if replacements else None
    replacement = first.get("value") if isinstance(first, dict) else None
    if not replacement:
        return None
    context = match.get("context")
    if isinstance(context, dict) and isinstance(context.get("offset"), int) and isinstance(context.get("length"), int):
        return context["offset"], context["length"], replacement
    if isinstance(match.get("offset"), int) and isinstance(match.get("length"), int):
        return match["offset"], match["length"], replacement
    return None


def apply_matches(sentence, matches):
    """Splice the first suggested replacement of every match into ``sentence``.

    Edits are applied right to left so earlier offsets stay valid.
    """
    if not isinstance(matches, list) or not matches:
        return sentence
    edits = [e for e in (_match_edit(m) for m in matches) if e]
    corrected = sentence
    for start, length, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
        corrected = corrected[:start] + replacement + corrected[start + length:]
    return corrected


def correct_grammar(sentence, url=None, language=None, timeout=None, session=None):
    """Polish ``sentence`` with LanguageTool; returns it unchanged on any failure."""
    http = session or requests
    try:
        resp = http.post(
            url or LANGUAGETOOL_URL,
            data={"text": sentence, "language": language or LANGUAGETOOL_LANGUAGE},
            timeout=timeout or GRAMMAR_TIMEOUT,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Grammar correction failed: %s", e)
        return sentence
    if not isinstance(data, dict):
        return sentence
    return apply_matches(sentence, data.get("matches"))


def identity_corrector(sentence):
    return sentence
