#!/usr/bin/env python3
"""Tests for merging curated principles (scripts/core_principles.py)"""

import copy
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from core_principles import (
    CORE_PRINCIPLES,
    MAX_PRINCIPLES_PER_TOPIC,
    dedupe_and_cap,
    merge_core_principles,
)


class TestDedupeAndCap:
    def test_first_occurrence_wins(self):
        assert dedupe_and_cap(['a', 'b', 'a', 'c', 'b']) == ['a', 'b', 'c']

    def test_cap(self):
        assert dedupe_and_cap(['a', 'b', 'a', 'c'], limit=2) == ['a', 'b']

    def test_default_cap(self):
        items = [f"principle {i}" for i in range(50)]
        assert dedupe_and_cap(items) == items[:MAX_PRINCIPLES_PER_TOPIC]


class TestCoreTable:
    def test_four_or_five_per_topic(self):
        assert len(CORE_PRINCIPLES) == 10
        for items in CORE_PRINCIPLES.values():
            assert 4 <= len(items) <= 5


class TestMerge:
    def test_seeds_lead_each_topic(self):
        merged = merge_core_principles({'shelter': ['A harvested shelter passage.']})
        seeds = CORE_PRINCIPLES['shelter']
        assert merged['shelter'] == seeds + ['A harvested shelter passage.']

    def test_every_core_topic_present(self):
        merged = merge_core_principles({})
        for topic, seeds in CORE_PRINCIPLES.items():
            assert merged[topic] == seeds

    def test_harvest_duplicate_of_seed_removed(self):
        seed = CORE_PRINCIPLES['fire'][0]
        merged = merge_core_principles({'fire': [seed, 'Harvested fire text.']})
        assert merged['fire'].count(seed) == 1
        assert merged['fire'][-1] == 'Harvested fire text.'

    def test_harvest_order_preserved(self):
        harvested = ['third', 'first', 'second']
        merged = merge_core_principles({'food': harvested})
        assert merged['food'][len(CORE_PRINCIPLES['food']):] == harvested

    def test_capped_at_twenty(self):
        harvested = {'water': [f"Harvested water passage {i}." for i in range(30)]}
        merged = merge_core_principles(harvested)
        assert len(merged['water']) == MAX_PRINCIPLES_PER_TOPIC
        assert merged['water'][:4] == CORE_PRINCIPLES['water']

    def test_harvest_only_topic_kept_and_cleaned(self):
        merged = merge_core_principles({'gear': ['knife', 'rope', 'knife']})
        assert merged['gear'] == ['knife', 'rope']

    def test_no_duplicates_anywhere(self):
        harvested = {topic: items * 3 for topic, items in CORE_PRINCIPLES.items()}
        merged = merge_core_principles(harvested)
        for items in merged.values():
            assert len(items) == len(set(items))
            assert len(items) <= MAX_PRINCIPLES_PER_TOPIC

    def test_input_not_modified(self):
        harvested = {'shelter': ['A harvested shelter passage.']}
        snapshot = copy.deepcopy(harvested)
        merge_core_principles(harvested)
        assert harvested == snapshot

    def test_custom_core_and_limit(self):
        merged = merge_core_principles({'gear': ['b', 'c']}, core={'gear': ['a']}, limit=2)
        assert merged == {'gear': ['a', 'b']}
