#!/usr/bin/env python3
"""
Hand-curated core principles, merged ahead of the text harvested from the PDF.

The curated sentences are short, accurate and already clean, so they lead
each topic; harvested passages fill the remaining slots up to the cap.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence

MAX_PRINCIPLES_PER_TOPIC = 20

CORE_PRINCIPLES: Dict[str, List[str]] = {
    'priorities': [
        "Rule of 3s: You can survive 3 minutes without air, 3 hours without shelter in harsh conditions, "
        "3 days without water, and 3 weeks without food.",
        "STOP principle: Stop, Think, Observe, Plan before taking action.",
        "Stay put if lost: Movement without a plan can make rescue harder and waste energy.",
        "Shelter is often more critical than food or water in extreme weather.",
        "Signal for rescue using three of anything (fires, whistle blows, mirror flashes) - "
        "the international distress signal.",
    ],
    'shelter': [
        "Shelter protects from wind, rain, and temperature extremes.",
        "Build shelter before dark to avoid working in dangerous conditions.",
        "Insulation from the ground is as important as overhead cover.",
        "Natural shelters like caves or fallen trees can save time and energy.",
    ],
    'water': [
        "Water is critical - dehydration kills faster than starvation.",
        "Always purify water from natural sources to avoid illness.",
        "In cold climates, melting snow requires energy and lowers body temperature.",
        "Ration sweat, not water - work during cooler hours to conserve water.",
    ],
    'fire': [
        "Fire provides warmth, water purification, signaling, and psychological comfort.",
        "Prepare tinder, kindling, and fuel before attempting to light a fire.",
        "Protect fire from wind and rain once started.",
        "Fire requires constant attention and fuel gathering.",
    ],
    'psychology': [
        "Panic leads to poor decisions and wastes energy.",
        "Maintaining morale is essential for survival.",
        "Small victories and routines help maintain mental stability.",
        "Fear is natural but must be controlled through planning and action.",
    ],
    'signaling': [
        "Three of anything is the international distress signal.",
        "Signal when aircraft or potential rescuers are nearby.",
        "Bright colors, smoke, mirrors, and noise all attract attention.",
        "Ground-to-air signals should be large and contrasting.",
    ],
    'navigation': [
        "Stay put if you're lost and people know your location.",
        "Navigate only if you know your destination and have energy.",
        "The sun rises in the east and sets in the west.",
        "Following water downstream often leads to civilization but uses energy.",
    ],
    'firstAid': [
        "Stop bleeding first - it can be life-threatening within minutes.",
        "Treat injuries promptly before they worsen.",
        "Hypothermia and hyperthermia are serious threats requiring immediate action.",
        "Immobilize fractures to prevent further damage.",
    ],
    'weather': [
        "Wind chill makes temperatures feel colder and increases heat loss.",
        "Wet clothing loses insulating properties and accelerates hypothermia.",
        "Shade and reducing activity helps in extreme heat.",
        "Weather changes can turn a manageable situation deadly.",
    ],
    'food': [
        "Food is the lowest priority in short-term survival.",
        "Energy spent hunting or foraging must be worth the calories gained.",
        "Some plants and animals are poisonous - know what you're eating.",
        "Insects and grubs are often safe protein sources if properly prepared.",
    ],
}


def dedupe_and_cap(items: Iterable[str], limit: int = MAX_PRINCIPLES_PER_TOPIC) -> List[str]:
    """Drop exact duplicates (first occurrence wins) and keep at most ``limit`` entries."""
    seen = set()
    unique: List[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        unique.append(item)
    return unique[:limit]


def merge_core_principles(harvested: Mapping[str, Sequence[str]],
                          core: Mapping[str, Sequence[str]] = CORE_PRINCIPLES,
                          limit: int = MAX_PRINCIPLES_PER_TOPIC) -> Dict[str, List[str]]:
    """
    Prepend the curated principles to each harvested topic.

    Topics only present in ``core`` are added; topics only present in
    ``harvested`` are kept. Every resulting topic is deduplicated and capped.
    The input mapping is not modified.
    """
    merged: Dict[str, List[str]] = {topic: list(items) for topic, items in harvested.items()}

    for topic, core_items in core.items():
        merged[topic] = [*core_items, *merged.get(topic, [])]

    return {topic: dedupe_and_cap(items, limit) for topic, items in merged.items()}
