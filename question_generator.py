"""
Offline study-question generator.

Pipeline:
  - normalize raw extracted text (boilerplate terms, bullets, dates, symbols)
  - split into sentence-like segments
  - mine weighted candidate phrases (see phrase_miner)
  - rank phrases into a bounded topic list
  - apply question templates per topic, plus MCQ / fill-in-the-blank items
  - de-duplicate, score and pick the top questions
  - pad short results from the segments and run grammar correction

Every failure path returns a single sentinel message instead of raising.
"""

import logging
import random
import re
from concurrent.futures import ThreadPoolExecutor
from operator import itemgetter
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence

from phrase_miner import mine_phrases
from utils.grammar import correct_grammar

logger = logging.getLogger("questly")

TARGET_COUNT = 10
MAX_TOPICS = 12
MIN_TOPICS = 3
MAX_FALLBACK_TOPICS = 5
MAX_CANDIDATES = 20
CANDIDATE_SOFT_LIMIT = 18
DEFAULT_CORRECTION_WORKERS = 4

EMPTY_FILE_MESSAGE = "File seems empty or unreadable."
NOT_ENOUGH_TEXT_MESSAGE = "Not enough readable text found."
NO_SEGMENTS_MESSAGE = "No readable content found to generate questions."
NO_TOPICS_MESSAGE = "Could not identify meaningful topics for question generation."
NO_QUESTIONS_MESSAGE = "No suitable content found to generate questions."

BLANK = "______"

TOPIC_STOPLIST: FrozenSet[str] = frozenset(
    {"Introduction", "Overview", "Chapter", "Section", "Summary", "Conclusion"}
)

QUESTION_TEMPLATES = (
    "Define {}.",
    "What is {}?",
    "Explain the concept of {}.",
    "How does {} work?",
    "Why is {} important?",
    "Describe the main features or characteristics of {}.",
    "Give an example where {} is applied in the real world.",
    "What are the main challenges associated with {}?",
    "Compare {} with a related concept and highlight the differences.",
    "How would you evaluate the effectiveness of {} in practice?",
)

_WHITESPACE_RE = re.compile(r"\s+")
# \w and \b are ASCII-only: accented letters are stripped, not kept as word characters
_HONORIFIC_RE = re.compile(
    r"\b(Mr\.?|Mrs\.?|Ms\.?|Dr\.?|Prof\.?|Professor|Assistant Professor)\b", re.IGNORECASE | re.ASCII
)
_BOILERPLATE_RE = re.compile(
    r"\b(University|Department|Overview|Introduction|KJSCE|College|Page|Lecture|Roll|Email|Contact)\b",
    re.IGNORECASE | re.ASCII,
)
_BULLET_RE = re.compile(r"[•*]")
_DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}", re.ASCII)
_DISALLOWED_CHAR_RE = re.compile(r"[^\w\s.\-,()/]", re.ASCII)
_SEGMENT_SPLIT_RE = re.compile(r"[\n;]+|(?<=[.?!])\s+")
_ALPHA_WORD_RE = re.compile(r"\b[a-zA-Z]{3,}\b", re.ASCII)
_ALPHA_RUN_RE = re.compile(r"[a-zA-Z]{3,}")
_TRAILING_PUNCT_RE = re.compile(r"[.,;:]$")

_DEFINITION_CUES_RE = re.compile(r"define|what is|explain|describe|how does|how is")
_APPLICATION_CUES_RE = re.compile(r"example|real world|applied|apply")
_CRITICAL_CUES_RE = re.compile(r"compare|advantages|disadvantages|challenges|fail")

Corrector = Callable[[str], str]


class QuestionGenerationError(Exception):
    """Raised by a pipeline stage that cannot continue; the message is the sentinel."""


class InsufficientContentError(QuestionGenerationError):
    pass


class NoTopicsFoundError(QuestionGenerationError):
    pass


def normalize_text(raw_text: str) -> str:
    txt = _WHITESPACE_RE.sub(" ", raw_text or "")
    txt = _HONORIFIC_RE.sub("", txt)
    txt = _BOILERPLATE_RE.sub("", txt)
    txt = _BULLET_RE.sub(" ", txt)
    txt = _DATE_RE.sub("", txt)
    txt = _DISALLOWED_CHAR_RE.sub("", txt)
    # removals above leave double spaces behind
    return _WHITESPACE_RE.sub(" ", txt).strip()


def split_segments(cleaned: str) -> List[str]:
    parts = (p.strip() for p in _SEGMENT_SPLIT_RE.split(cleaned))
    return [p for p in parts if len(p) > 6 and _ALPHA_WORD_RE.search(p)]


def _fallback_topics(segments: Sequence[str]) -> List[str]:
    topics = []
    for segment in segments:
        token = next((w for w in segment.split() if len(w) > 5), None)
        if token:
            topics.append(token)
    return topics[:MAX_FALLBACK_TOPICS]


def select_topics(
    weights: Dict[str, int],
    segments: Sequence[str],
    stoplist: FrozenSet[str] = TOPIC_STOPLIST,
) -> List[str]:
    """Rank mined phrases by weight and keep a bounded topic list.

    Ties keep the order in which phrases were first mined. Falls back to one
    long token per segment when nothing survives filtering.
    """
    ranked = sorted(weights.items(), key=itemgetter(1), reverse=True)
    phrases = [_TRAILING_PUNCT_RE.sub("", phrase).strip() for phrase, _ in ranked]
    phrases = [p for p in phrases if _ALPHA_RUN_RE.search(p) and p not in stoplist]
    topics = phrases[: min(MAX_TOPICS, max(MIN_TOPICS, len(phrases)))]
    if topics:
        return topics
    topics = _fallback_topics(segments)
    if not topics:
        raise NoTopicsFoundError(NO_TOPICS_MESSAGE)
    logger.info("No ranked topics; using %d fallback tokens", len(topics))
    return topics


def build_mcq(target: str, topics: Sequence[str], rng: random.Random) -> Dict:
    """Multiple-choice record for ``target`` with distractors drawn from ``topics``.

    Distractors are the topics sharing the most words with the target. When
    fewer than three exist, inflected copies of the target fill the gap.
    """
    target_words = set(target.lower().split())
    pool = [t for t in topics if t.lower() != target.lower()]
    scored = sorted(
        pool,
        key=lambda p: sum(1 for w in p.lower().split() if w in target_words),
        reverse=True,
    )
    distractors = scored[:3]
    while len(distractors) < 3:
        distractors.append(target + ("s" if rng.random() < 0.5 else "ing"))
    options = [target] + distractors
    rng.shuffle(options)
    return {
        "question": f"Which of the following best describes {target}?",
        "options": options,
        "answer": target,
    }


def format_mcq(mcq: Dict) -> str:
    options = " | ".join(f"{chr(65 + idx)}. {opt}" for idx, opt in enumerate(mcq["options"]))
    return f"{mcq['question']}\nOptions: {options}\nAnswer: {mcq['answer']}"


def make_fill_in_blank(topic: str, segments: Sequence[str]) -> str:
    pattern = re.compile(r"\b" + re.escape(topic) + r"\b", flags=re.IGNORECASE)
    for segment in segments:
        if pattern.search(segment):
            return "Fill in the blank: " + pattern.sub(BLANK, segment, count=1)
    return f"Explain the term: {topic}"


def synthesize_questions(topics: Sequence[str], segments: Sequence[str], rng: random.Random) -> List[str]:
    candidates: List[str] = []
    for i, topic in enumerate(topics):
        if len(candidates) >= MAX_CANDIDATES:
            break
        candidates.append(QUESTION_TEMPLATES[i % len(QUESTION_TEMPLATES)].format(topic))
        if i % 2 == 0:
            candidates.append(f"How is {topic} applied in practice?")
        else:
            candidates.append(f"Why might {topic} fail in certain situations?")
        if i % 3 == 0:
            candidates.append(format_mcq(build_mcq(topic, topics, rng)))
        elif i % 3 == 1:
            candidates.append(make_fill_in_blank(topic, segments))
        if len(candidates) >= CANDIDATE_SOFT_LIMIT:
            break
    return candidates


def deduplicate(candidates: Sequence[str]) -> List[str]:
    seen = set()
    unique = []
    for candidate in candidates:
        text = _WHITESPACE_RE.sub(" ", candidate).strip()
        if text in seen or len(text) <= 10:
            continue
        seen.add(text)
        unique.append(text)
    return unique


def score_question(question: str) -> int:
    low = question.lower()
    score = 0
    if _DEFINITION_CUES_RE.search(low):
        score += 5
    if _APPLICATION_CUES_RE.search(low):
        score += 3
    if _CRITICAL_CUES_RE.search(low):
        score += 2
    return score + max(0, 6 - len(question) // 60)


def rank_questions(questions: Sequence[str], limit: int = TARGET_COUNT) -> List[str]:
    # sorted() is stable with reverse=True, so ties keep synthesis order
    return sorted(questions, key=score_question, reverse=True)[:limit]


def _correct_each(prompts: Sequence[str], corrector: Corrector, max_workers: int) -> List[Optional[str]]:
    """Run ``corrector`` over ``prompts`` concurrently, keeping input order.

    A prompt whose correction raises maps to ``None``.
    """
    if not prompts:
        return []

    def attempt(prompt):
        try:
            return corrector(prompt)
        except Exception as exc:
            logger.warning("Grammar correction failed for %r: %s", prompt[:60], exc)
            return None

    workers = max(1, min(max_workers, len(prompts)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(attempt, prompts))


def _main_point_prompt(segment: str) -> str:
    suffix = "..." if len(segment) > 120 else ""
    return f"What is the main point of: {segment[:120]}{suffix}"


def assemble_output(
    ranked: Sequence[str],
    segments: Sequence[str],
    corrector: Corrector,
    limit: int = TARGET_COUNT,
    max_workers: int = DEFAULT_CORRECTION_WORKERS,
) -> List[str]:
    pick = list(ranked[:limit])
    if len(pick) < limit:
        for idx, segment in enumerate(segments[:limit]):
            if idx % 2 == 0:
                alt = f"Summarize the following: {segment}"
            else:
                alt = f"What is the main idea of: {segment}"
            if len(pick) < limit and alt not in pick:
                pick.append(alt)

    final = []
    for original, fixed in zip(pick, _correct_each(pick, corrector, max_workers)):
        if fixed and len(fixed.split()) >= 3:
            final.append(fixed.strip())
        else:
            final.append(original)

    if len(final) < limit:
        extras = [_main_point_prompt(s) for s in segments[: limit - len(final)]]
        for extra, fixed in zip(extras, _correct_each(extras, corrector, max_workers)):
            final.append(fixed or extra)

    return final[:limit] if final else [NO_QUESTIONS_MESSAGE]


def generate_questions(
    text: str,
    corrector: Corrector = correct_grammar,
    rng: Optional[random.Random] = None,
    limit: int = TARGET_COUNT,
    max_workers: int = DEFAULT_CORRECTION_WORKERS,
) -> List[str]:
    """Turn extracted document text into at most ``limit`` study questions.

    ``rng`` drives MCQ filler options and option order; pass a seeded
    ``random.Random`` for reproducible output. Never raises for bad content:
    a single sentinel message is returned instead.
    """
    if not text or len(text.strip()) < 30:
        return [EMPTY_FILE_MESSAGE]
    rng = rng or random.Random()
    try:
        cleaned = normalize_text(text)
        if len(cleaned) < 50:
            raise InsufficientContentError(NOT_ENOUGH_TEXT_MESSAGE)
        segments = split_segments(cleaned)
        if not segments:
            raise InsufficientContentError(NO_SEGMENTS_MESSAGE)
        topics = select_topics(mine_phrases(segments), segments)
    except QuestionGenerationError as exc:
        logger.info("Question generation stopped early: %s", exc)
        return [str(exc)]

    logger.info("Generating questions from %d segments and %d topics", len(segments), len(topics))
    candidates = deduplicate(synthesize_questions(topics, segments, rng))
    ranked = rank_questions(candidates, limit)
    return assemble_output(ranked, segments, corrector, limit=limit, max_workers=max_workers)
