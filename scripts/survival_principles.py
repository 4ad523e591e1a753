#!/usr/bin/env python3
"""
Read access to the cleaned survival principles knowledge base.

Used by the game to attach real handbook guidance to decisions, and by the
scenario generator as static reference text.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from corpus_common import PRINCIPLES_PATH, MalformedInputError, read_json

PRINCIPLES_PER_CATEGORY_FOR_DECISION = 3

# Which categories explain the outcome of each in-game decision
DECISION_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    'build-shelter': ('shelter', 'priorities'),
    'improve-shelter': ('shelter',),
    'start-fire': ('fire', 'priorities'),
    'maintain-fire': ('fire',),
    'find-water': ('water', 'priorities'),
    'purify-water': ('water',),
    'forage': ('food',),
    'hunt': ('food',),
    'fish': ('food',),
    'navigate': ('navigation', 'priorities'),
    'signal': ('signaling', 'priorities'),
    'treat-injury': ('firstAid',),
    'rest': ('psychology', 'priorities'),
    'stay-put': ('priorities', 'psychology'),
    'panic-move': ('psychology', 'priorities'),
    'assess-weather': ('weather',),
}

# (category, how many) picked after the two general priorities
ENVIRONMENT_TIPS: Dict[str, Tuple[Tuple[str, int], ...]] = {
    'forest': (('shelter', 2), ('water', 1)),
    'jungle': (('shelter', 2), ('water', 1)),
    'desert': (('water', 2), ('shelter', 1)),
    'arctic': (('shelter', 2), ('fire', 1)),
    'tundra': (('shelter', 2), ('fire', 1)),
    'mountain': (('navigation', 1), ('shelter', 1), ('weather', 1)),
}
DEFAULT_ENVIRONMENT_TIPS: Tuple[Tuple[str, int], ...] = (('shelter', 1), ('water', 1))

POOR_QUALITIES = ('poor', 'critical-error')


class PrincipleLibrary:
    """Query helpers over a knowledge base document."""

    def __init__(self, document: Mapping[str, Any]):
        principles = document.get('principles') if isinstance(document, Mapping) else None
        if not isinstance(principles, Mapping):
            raise MalformedInputError("knowledge base has no 'principles' mapping")
        self._metadata: Dict[str, Any] = dict(document.get('metadata') or {})
        self._principles: Dict[str, List[str]] = {}
        for category, items in principles.items():
            if not isinstance(items, list):
                raise MalformedInputError(f"category '{category}' is not a list")
            self._principles[category] = [p for p in items if isinstance(p, str)]

    @classmethod
    def load(cls, path: Path = PRINCIPLES_PATH) -> 'PrincipleLibrary':
        return cls(read_json(path))

    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    def categories(self) -> List[str]:
        return list(self._principles)

    def by_category(self, category: str) -> List[str]:
        return list(self._principles.get(category, []))

    def random_principle(self, category: str, rng: Optional[random.Random] = None) -> Optional[str]:
        principles = self._principles.get(category)
        if not principles:
            return None
        return (rng or random).choice(principles)

    def search(self, query: str) -> List[Tuple[str, str]]:
        """Case-insensitive substring search; returns (category, principle) pairs."""
        needle = query.lower()
        return [
            (category, principle)
            for category, principles in self._principles.items()
            for principle in principles
            if needle in principle.lower()
        ]

    def for_decision(self, decision_id: str) -> List[str]:
        found: List[str] = []
        for category in DECISION_CATEGORIES.get(decision_id, ()):
            found.extend(self.by_category(category)[:PRINCIPLES_PER_CATEGORY_FOR_DECISION])
        return found

    def educational_feedback(self, decision_id: str, quality: str,
                             rng: Optional[random.Random] = None) -> Optional[str]:
        """
        Pick a principle explaining why a decision went well or badly.

        Poor and critical decisions get the leading (most fundamental)
        principle; good ones a random pick among the first three. Unknown
        decisions fall back to the first general priority.
        """
        principles = self.for_decision(decision_id)
        if not principles:
            general = self.by_category('priorities')
            return general[0] if general else None

        if quality in POOR_QUALITIES:
            return principles[0]
        return (rng or random).choice(principles[:PRINCIPLES_PER_CATEGORY_FOR_DECISION])

    def environment_tips(self, environment: str) -> List[str]:
        tips = self.by_category('priorities')[:2]
        picks = ENVIRONMENT_TIPS.get(environment.lower(), DEFAULT_ENVIRONMENT_TIPS)
        for category, count in picks:
            tips.extend(self.by_category(category)[:count])
        return tips

    def reference_text(self, max_chars: Optional[int] = None) -> str:
        """Render all principles as plain prompt text, one heading per category."""
        sections = []
        for category, principles in self._principles.items():
            if not principles:
                continue
            lines = [f"{category}:"] + [f"- {p}" for p in principles]
            sections.append('\n'.join(lines))
        text = '\n\n'.join(sections)
        return text if max_chars is None else text[:max_chars]
