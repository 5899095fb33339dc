"""
Candidate phrase mining for the question generator.

Each segment is run through a list of extractors; every extractor returns the
phrases it proposes for that segment. The proposals are merged into one ordered
set per segment, and each distinct phrase adds ``weight(phrase)`` to a global
tally. The tally keeps first-seen order so ties rank deterministically.
"""

import re
from collections import Counter
from typing import Callable, Dict, Iterable, List, Sequence

from nltk.util import everygrams

CAPITALIZED_SEQUENCE_RE = re.compile(r"\b([A-Z][a-z0-9]+(?:\s+[A-Z][a-z0-9]+){0,4})\b", re.ASCII)
TECHNICAL_TOKEN_RE = re.compile(r"\b([A-Z]{2,}|[a-zA-Z]+[A-Z][a-zA-Z0-9]+)\b", re.ASCII)
LONG_WORD_RE = re.compile(r"\b[a-zA-Z]{6,}\b", re.ASCII)
ALPHA_WORD_RE = re.compile(r"\b[a-zA-Z]{3,}\b", re.ASCII)
_TOKEN_STRIP_RE = re.compile(r"[^\w-]", re.ASCII)

MAX_WINDOW = 4
MAX_PHRASE_WEIGHT = 5

Extractor = Callable[[str], Iterable[str]]


def tokenize(segment: str) -> List[str]:
    """Split on whitespace and strip everything but word characters and hyphens.

    Tokens that strip to nothing are kept as empty strings; they act as
    window breakers for :func:`window_phrases`.
    """
    return [_TOKEN_STRIP_RE.sub("", word) for word in segment.split()]


def capitalized_sequences(segment: str) -> List[str]:
    return CAPITALIZED_SEQUENCE_RE.findall(segment)


def technical_tokens(segment: str) -> List[str]:
    # acronyms (ABC) and camel-case tokens (JavaScript, iPhone)
    return TECHNICAL_TOKEN_RE.findall(segment)


def window_phrases(segment: str, max_len: int = MAX_WINDOW) -> List[str]:
    phrases = []
    run: List[str] = []
    for token in tokenize(segment) + [""]:
        if token:
            run.append(token)
            continue
        if run:
            for gram in everygrams(run, min_len=1, max_len=max_len):
                phrase = " ".join(gram)
                if len(phrase) > 3 and ALPHA_WORD_RE.search(phrase):
                    phrases.append(phrase)
        run = []
    return phrases


def long_words(segment: str) -> List[str]:
    return LONG_WORD_RE.findall(segment)


DEFAULT_EXTRACTORS: Sequence[Extractor] = (
    capitalized_sequences,
    technical_tokens,
    window_phrases,
    long_words,
)


def phrase_weight(phrase: str, cap: int = MAX_PHRASE_WEIGHT) -> int:
    """Weight one occurrence of ``phrase``: its word count, capped at ``cap``."""
    return min(cap, len(phrase.split()))


def segment_candidates(segment: str, extractors: Sequence[Extractor] = DEFAULT_EXTRACTORS) -> List[str]:
    """Ordered, de-duplicated union of all extractor proposals for one segment."""
    seen = {}
    for extractor in extractors:
        for phrase in extractor(segment):
            key = phrase.strip()
            if key and key not in seen:
                seen[key] = None
    return list(seen)


def mine_phrases(
    segments: Iterable[str],
    extractors: Sequence[Extractor] = DEFAULT_EXTRACTORS,
    weight: Callable[[str], int] = phrase_weight,
) -> Dict[str, int]:
    """Aggregate phrase weights across segments.

    A phrase contributes at most once per segment, no matter how many
    extractors proposed it.
    """
    totals: Counter = Counter()
    for segment in segments:
        for phrase in segment_candidates(segment, extractors):
            totals[phrase] += weight(phrase)
    return totals
