from __future__ import annotations

"""
Keyword roast classifier.

Design intent:
- Map a topic to one of five fixed categories with ordered substring rules.
- Draw one line uniformly at random from the matched category.
- Keep the table immutable; categories never change at runtime.
"""

import random
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Category(str, Enum):
    FASHION = "fashion"
    FOOD = "food"
    TECH = "tech"
    TALENT = "talent"
    DEFAULT = "default"


@dataclass(frozen=True)
class ClassificationResult:
    category: Category
    roast: str


# Priority order matters: first matching rule wins.
_CATEGORY_RULES: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.FASHION, ("fashion", "cloth", "dress", "style", "outfit")),
    (Category.FOOD, ("food", "pizza", "eat", "dish", "pineapple")),
    (Category.TECH, ("tech", "code", "computer", "program")),
    (Category.TALENT, ("sing", "talent", "skill", "voice")),
)

ROAST_LINES: Mapping[Category, tuple[str, ...]] = MappingProxyType(
    {
        Category.FASHION: (
            "Your fashion sense is so bad, even a scarecrow would give you fashion advice.",
            "If ugly were a crime, your outfit would be a life sentence without parole.",
            "Your style is what happens when a blindfolded person dresses in the dark during a power outage.",
        ),
        Category.FOOD: (
            "That food choice is so wrong, even the garbage can would reject it.",
            "Your taste in food is what happens when someone lets a toddler plan the menu.",
            "That dish is so bad, it makes cafeteria food look like a Michelin-star meal.",
        ),
        Category.TECH: (
            "Your tech skills are so outdated, you make dial-up internet look cutting edge.",
            "If incompetence were code, you'd be the entire Stack Overflow of failure.",
            "Your coding is so bad, even a broken keyboard would produce better output.",
        ),
        Category.TALENT: (
            "Your talent is so limited, it makes a rock look multi-talented.",
            "If failure were an Olympic sport, you'd be the gold medalist, world record holder, and defending champion.",
            "Your skills are so poor, even a participation trophy would feel insulted to be given to you.",
        ),
        # Sentence fragments; the quoted topic is prepended.
        Category.DEFAULT: (
            "is so disappointing, even my AI feelings got hurt analyzing it.",
            "makes me wish I was a simple calculator instead of dealing with this.",
            "is the reason why aliens won't talk to us.",
        ),
    }
)


def match_category(topic: str) -> Category:
    topic_lower = topic.lower()
    for category, keywords in _CATEGORY_RULES:
        if any(keyword in topic_lower for keyword in keywords):
            return category
    return Category.DEFAULT


def roast_lines(category: Category) -> tuple[str, ...]:
    return ROAST_LINES[Category(category)]


def classify(topic: str, rng: random.Random | None = None) -> ClassificationResult:
    """
    Pick a roast for ``topic``.

    Named categories return one of their fixed sentences verbatim. The
    ``default`` category returns the original topic in double quotes followed
    by a sentence fragment, e.g. ``"knitting" is the reason why ...``.
    """
    category = match_category(topic)
    line = (rng or random).choice(ROAST_LINES[category])
    if category is Category.DEFAULT:
        return ClassificationResult(category=category, roast=f'"{topic}" {line}')
    return ClassificationResult(category=category, roast=line)
