#!/usr/bin/env python3
"""
Principle quality filters — decide whether an extracted sentence is clean.

A candidate principle is accepted only if it passes every rule below, checked
in order. The first failing rule names the rejection reason:

  type         not a string
  length       outside 20-200 characters
  capital      does not start with an uppercase Latin letter
  page-marker  contains a page range like '-- 5 of 376 --'
  dashes       contains '--' anywhere
  too-short    3 words or fewer
  ellipsis     ends with '...'
  punctuation  does not end with '.', '!' or '?'
  repeated     first half of the words equals the second half (> 10 words)
  header       chapter/section header such as '5 - CAMP CRAFT'
  fragment     starts with 'and ', 'or ', 'but ' or 'so '
  artifact     contains a known extraction artifact of the source corpus

Artifact lists are per-corpus data, registered in CORPUS_ARTIFACTS.
"""

import re
from typing import Dict, Iterable, Optional, Tuple

MIN_LENGTH = 20
MAX_LENGTH = 200
MIN_WORDS = 4
REPETITION_MIN_WORDS = 11

BORDERLINE_MIN_LENGTH = 15

TERMINAL_PUNCTUATION = ('.', '!', '?')
FRAGMENT_OPENERS = ('and ', 'or ', 'but ', 'so ')

CAPITAL_START_RE = re.compile(r'^[A-Z]')
PAGE_MARKER_RE = re.compile(r'--\s*\d+\s+of\s+\d+\s*--')
ELLIPSIS_RE = re.compile(r'\.{3}$')
CHAPTER_HEADER_RE = re.compile(r'^\d+\s*-\s*[A-Z\s]+$', re.IGNORECASE)


# ---------------------------------------------------------------------------
# Artifact denylists
# ---------------------------------------------------------------------------

# Fragments of scanned-text noise seen in the SAS Survival Handbook extraction:
# sentences cut mid-paragraph, running headers and caption debris.
SAS_HANDBOOK_ARTIFACTS: Tuple[str, ...] = (
    'of 376',
    'circumstances; soldiers',
    'to take everything possible',
    'The main elements of survival are Food, Fire, Shelter, Water',
    'from the elements. This means',
    'Local methods of',
    'Clothing should give',
    'sack to prevent',
    'fats, proteins and carbohydrates',
    'hazardous to the survivor',
    'understanding of survival needs',
    'While waiting to be rescued',
    'terrain as possible',
    'for things going wrong',
    'travel. Water sources',
    'jersey if it turns',
    'there is a danger',
    'waterproofs if you are',
    'gets colder they',
    'Finally, choose a pack',
    'electrical kit water',
    'species of animals',
    'that you can light a fire',
    'fire is safe before',
    'You must ensure',
    'provide our bodies',
    'the polar regions',
    'been a danger',
    'As for natural fabrics',
    'lightest of all natural',
    'It is much easier to use matches',
    'Invaluable for starting',
    'Can start a fire from direct',
    'and screw on to',
    'heat loss. Although wet',
    'your belt or on',
    'onto the ground',
    'tests for plant foods',
    'can be very dangerous to some',
    'traps what the body',
    'secure zips rather',
    'foodstuffs that can',
    'others: fish hooks',
    'inedible. Tallow',
    'Fish hooks and line',
    'will catch both',
    'Fat is the hardest',
    'very good in flavour',
    'food. There are always',
    'temperature—not just',
    'The still may also',
    'and keep cone',
    'The Barrel cactus',
    'tin, knife, compass',
    'cards, navigating',
    'Study your maps',
    'unless you can identify',
    'to confirm your',
    'Most have the facility',
    'When planning your route',
    'a small coin',
    'animals and preparing',
    'handle breaking',
    'found in the southern',
    'Desert animals can',
    'Salt can be obtained',
    'Navigation Navigation',
    'Leave an indication',
    'rescuers to know',
    '10 - RESCUE',
    'their rescue. In areas',
    'may find you',
    '5 Because you have',
    'Do this as soon',
    'clear signal you need',
    'Prearrange a signals',
    'Signals will be weak',
    'know where you last',
    'make your call',
    'but not the receiving',
    'the pouch contains',
    'Signaling in Rescue',
    'themselves dangerous',
    "Don't smoke",
    'on. If there is an emergency',
    'misuse of any techniques',
    'replaced by wind',
    'Use to hold together',
    'butterfly sutures',
    '– Pain, illness',
    'to avoid the risk',
    'individual deal first',
    'made by kissing',
    'Frostbite, hypothermia',
    'Be careful that your rope',
    'Handle carefully. Their spines',
    'bites are not enough',
    'incapacitate—wounded',
    'provocation to charge',
    'bumbling—easily',
    'spinach; use their',
    'Produced by Essential',
    'principles form an essential',
    'and capabilities',
    'It is essential that you use',
    'ESSENTIALS',
    'of priority we use',
    'schedules. Have a priority',
    'must be given priority',
    'Anti-malaria tablets',
    'How long can the body',
    'immediate treatment',
    'on all animals except',
    'therefore essential',
    'The advice given here',
    'mental exercise',
    'Equally important',
    'There is nothing like',
    'The survival situation',
    'rationally and realistically',
    'develop and that is',
    'which can knock you',
    'feeling of loneliness',
    'Climb to the highest',
    'Overcome your fear',
    '7 Millets',
    'However, when alarmed',
    'First taking the bait',
    'morale for the single',
    'Not only should everyone',
    'ensure that each and every',
    'important, therefore',
    'You could be isolated',
    'This is the firm foundation',
    '– What special equipment',
    'cold climates. At least',
    'and mountains, and what',
    'kind of vegetation',
    'The wind and rain',
    'windproof garments',
    'comfortable to walk',
    'act like an animal',
    'inside. When wet',
    'wick and draws',
    'back, which quickly',
    'easily carried there',
)

CORPUS_ARTIFACTS: Dict[str, Tuple[str, ...]] = {
    'sas_handbook': SAS_HANDBOOK_ARTIFACTS,
}

DEFAULT_CORPUS = 'sas_handbook'


def artifacts_for(corpus: str) -> Tuple[str, ...]:
    """Look up the artifact denylist registered for a source corpus."""
    try:
        return CORPUS_ARTIFACTS[corpus]
    except KeyError:
        known = ', '.join(sorted(CORPUS_ARTIFACTS))
        raise ValueError(f"Unknown corpus '{corpus}' (known: {known})") from None


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def has_terminal_punctuation(text: str) -> bool:
    return text.endswith(TERMINAL_PUNCTUATION)


def is_self_repetition(words: list) -> bool:
    """
    Detect a passage the PDF renderer emitted twice in a row.

    Only the exact split at floor(len/2) is compared, so an odd word count
    whose repeated block does not straddle the midpoint is not caught.
    """
    if len(words) < REPETITION_MIN_WORDS:
        return False
    midpoint = len(words) // 2
    return ' '.join(words[:midpoint]) == ' '.join(words[midpoint:])


def find_artifact(text: str, artifacts: Iterable[str]) -> Optional[str]:
    for artifact in artifacts:
        if artifact in text:
            return artifact
    return None


def rejection_reason(candidate, artifacts: Iterable[str] = SAS_HANDBOOK_ARTIFACTS) -> Optional[str]:
    """Return the label of the first rule ``candidate`` fails, or None if it is clean."""
    if not isinstance(candidate, str):
        return 'type'

    if len(candidate) < MIN_LENGTH or len(candidate) > MAX_LENGTH:
        return 'length'

    if not CAPITAL_START_RE.match(candidate):
        return 'capital'

    if PAGE_MARKER_RE.search(candidate):
        return 'page-marker'

    if '--' in candidate:
        return 'dashes'

    # split(' ') rather than split(): runs of spaces count as extra words
    words = candidate.split(' ')
    if len(words) < MIN_WORDS:
        return 'too-short'

    if ELLIPSIS_RE.search(candidate):
        return 'ellipsis'

    if not has_terminal_punctuation(candidate):
        return 'punctuation'

    if is_self_repetition(words):
        return 'repeated'

    if CHAPTER_HEADER_RE.match(candidate):
        return 'header'

    # Case-sensitive: a capitalised 'And ' is allowed through
    if candidate.startswith(FRAGMENT_OPENERS):
        return 'fragment'

    if find_artifact(candidate, artifacts) is not None:
        return 'artifact'

    return None


def is_principle_clean(candidate, artifacts: Iterable[str] = SAS_HANDBOOK_ARTIFACTS) -> bool:
    """Accept/reject a single candidate principle. Never raises."""
    return rejection_reason(candidate, artifacts) is None


def is_borderline(candidate) -> bool:
    """
    Flag near-misses worth a manual look: 15-19 characters long, or a
    plausible length (20-200) that is only missing terminal punctuation.
    """
    if not isinstance(candidate, str):
        return False
    length = len(candidate)
    if BORDERLINE_MIN_LENGTH <= length < MIN_LENGTH:
        return True
    return MIN_LENGTH <= length <= MAX_LENGTH and not has_terminal_punctuation(candidate)
