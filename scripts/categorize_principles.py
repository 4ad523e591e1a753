#!/usr/bin/env python3
"""
Sort raw handbook text into survival topics.

A line that mentions one of a topic's keywords opens a new passage for that
topic; the following lines are appended to it until another keyword line
appears or the passage reaches MAX_PASSAGE_LINES. Passages are kept only if
their joined length falls strictly between MIN_PASSAGE_CHARS and
MAX_PASSAGE_CHARS.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

MIN_LINE_CHARS = 10
MAX_PASSAGE_LINES = 10
MIN_PASSAGE_CHARS = 50
MAX_PASSAGE_CHARS = 500

PAGE_NUMBER_RE = re.compile(r'^\d+$')

TopicTable = Sequence[Tuple[str, Tuple[str, ...]]]

# Checked top to bottom; the first topic with a matching keyword wins, so a
# line mentioning both "fire" and "heat" belongs to fire, not weather.
TOPIC_KEYWORDS: TopicTable = (
    ('shelter', ('shelter', 'refuge', 'protection', 'camp', 'bivouac', 'tent')),
    ('water', ('water', 'hydration', 'dehydration', 'purification', 'drinking')),
    ('fire', ('fire', 'warmth', 'heat', 'ignition', 'tinder', 'kindling')),
    ('food', ('food', 'edible', 'hunting', 'foraging', 'fish', 'trap', 'snare')),
    ('navigation', ('navigation', 'compass', 'direction', 'north', 'south', 'stars', 'map')),
    ('signaling', ('signal', 'rescue', 'whistle', 'mirror', 'smoke', 'flare', 'distress')),
    ('firstAid', ('first aid', 'injury', 'wound', 'bleeding', 'fracture', 'hypothermia', 'frostbite')),
    ('priorities', ('priority', 'priorities', 'survival needs', 'essential')),
    ('psychology', ('morale', 'panic', 'fear', 'mental', 'psychological', 'stay calm')),
    ('weather', ('weather', 'temperature', 'wind', 'cold', 'heat', 'rain', 'snow')),
)


def topic_names(topics: TopicTable = TOPIC_KEYWORDS) -> List[str]:
    return [topic for topic, _ in topics]


def is_noise_line(line: str) -> bool:
    """Very short lines and bare page numbers carry no guidance."""
    return len(line) < MIN_LINE_CHARS or bool(PAGE_NUMBER_RE.match(line))


def match_topic(line: str, topics: TopicTable = TOPIC_KEYWORDS) -> Optional[str]:
    line_upper = line.upper()
    for topic, keywords in topics:
        if any(keyword.upper() in line_upper for keyword in keywords):
            return topic
    return None


def categorize_text(text: str, topics: TopicTable = TOPIC_KEYWORDS) -> Dict[str, List[str]]:
    """
    Split raw text into per-topic passages.

    Every topic in ``topics`` is present in the result, in table order, even
    when no passage was found for it.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected raw text as str, got {type(text).__name__}")

    principles: Dict[str, List[str]] = {topic: [] for topic in topic_names(topics)}

    current_topic: Optional[str] = None
    buffer: List[str] = []

    def flush() -> None:
        nonlocal buffer
        if current_topic is not None and buffer:
            passage = ' '.join(buffer).strip()
            if MIN_PASSAGE_CHARS < len(passage) < MAX_PASSAGE_CHARS:
                principles[current_topic].append(passage)
        buffer = []

    for raw_line in text.split('\n'):
        line = raw_line.strip()
        if not line or is_noise_line(line):
            continue

        topic = match_topic(line, topics)
        if topic is not None:
            flush()
            current_topic = topic
            buffer = [line]
            continue

        # A full passage was flushed: wait for the next keyword line
        if current_topic is None or not buffer:
            continue

        buffer.append(line)
        if len(buffer) >= MAX_PASSAGE_LINES:
            flush()

    flush()
    return principles
