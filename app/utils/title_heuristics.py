"""Keyword-based session titles, used when the language model cannot name a session."""

from __future__ import annotations

import re
from typing import NamedTuple, Sequence

MAX_TITLE_LENGTH = 50
DEFAULT_EMOJI = "💬"
DEFAULT_TITLE = "New Chat"

_NON_WORD_RE = re.compile(r"[^\w\s]")


class Topic(NamedTuple):
    name: str
    emoji: str
    keywords: tuple[str, ...]


TOPICS: tuple[Topic, ...] = (
    Topic(
        "Productivity",
        "⚡",
        ("productivity", "efficient", "time management", "workflow", "routine", "schedule", "planning"),
    ),
    Topic(
        "Learning",
        "📚",
        ("learn", "study", "education", "course", "book", "reading", "knowledge", "skill"),
    ),
    Topic(
        "Health",
        "💪",
        ("health", "fitness", "exercise", "workout", "diet", "nutrition", "wellness", "gym"),
    ),
    Topic(
        "Business",
        "💼",
        ("business", "marketing", "strategy", "startup", "entrepreneur", "sales", "growth"),
    ),
    Topic(
        "Technology",
        "💻",
        ("tech", "programming", "code", "software", "app", "development", "computer"),
    ),
    Topic(
        "Finance",
        "💰",
        ("money", "finance", "investment", "budget", "saving", "financial", "wealth"),
    ),
    Topic(
        "Relationships",
        "❤️",
        ("relationship", "dating", "marriage", "family", "friends", "social"),
    ),
    Topic(
        "Creativity",
        "🎨",
        ("creative", "art", "design", "writing", "music", "inspiration", "ideas"),
    ),
    Topic(
        "Travel",
        "✈️",
        ("travel", "vacation", "trip", "destination", "explore", "adventure"),
    ),
    Topic(
        "Cooking",
        "👨‍🍳",
        ("cook", "recipe", "food", "meal", "kitchen", "cooking", "chef"),
    ),
)


def default_title(include_emoji: bool = True) -> str:
    return f"{DEFAULT_EMOJI} {DEFAULT_TITLE}" if include_emoji else DEFAULT_TITLE


def cap_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    if len(title) > max_length:
        return title[: max_length - 3] + "..."
    return title


def _capitalize_words(text: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in text.split(" "))


def best_topic(text: str) -> Topic | None:
    """Topic with the most keyword hits in lowercased text; first listed wins ties."""
    best: Topic | None = None
    max_matches = 0
    for topic in TOPICS:
        matches = sum(1 for keyword in topic.keywords if keyword in text)
        if matches > max_matches:
            max_matches = matches
            best = topic
    return best


def heuristic_title(messages: Sequence[str], include_emoji: bool = True) -> str:
    """
    Title from the first few user messages.

    "<emoji> <Topic>: <Two Key Words>" when a topic matches, otherwise the
    first three words longer than three characters, otherwise "New Chat".
    """
    if not messages:
        return default_title(include_emoji)

    text = " ".join(messages[:3]).lower()
    topic = best_topic(text)
    key_words = [w for w in text.split() if len(w) > 3][:4]

    if topic is not None:
        phrase = _NON_WORD_RE.sub("", " ".join(key_words[:2])).strip()
        label = f"{topic.name}: {_capitalize_words(phrase)}" if phrase else topic.name
        title = f"{topic.emoji} {label}" if include_emoji else label
    else:
        phrase = _NON_WORD_RE.sub("", " ".join(key_words[:3])).strip()
        if not phrase:
            return default_title(include_emoji)
        label = _capitalize_words(phrase)
        title = f"{DEFAULT_EMOJI} {label}" if include_emoji else label

    return cap_title(title)
