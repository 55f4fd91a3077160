"""
Context Prioritizer

Ranks typed context elements by weight and recency, then greedily admits
them under a token budget. When even the top-ranked element does not fit,
it is truncated and returned alone.

Weights are looked up by dot-hierarchical type prefix: the longest key that
prefixes the element type wins ("character.attributes.strength" uses
"character.attributes" over "character").
"""

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional

from models.context import ContextElement
from services.token_estimator import estimate_tokens, truncate_to_tokens

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 1

DEFAULT_PRIORITY_WEIGHTS: Dict[str, float] = {
    'character.current_state': 5,
    'character.attributes': 4,
    'character.skills': 3,
    'character.inventory': 3,
    'character.backstory': 1,
    'character': 4,
    'world.rules': 4,
    'world.genre': 3,
    'world.description': 2,
    'world.history': 1,
    'world': 3,
    'event': 3,
}


class ContextPrioritizer:
    """
    Selects the most important context elements that fit a token limit.

    Holds no per-call state, so one instance can be shared across requests.
    """

    def __init__(self, custom_weights: Optional[Mapping[str, float]] = None):
        """
        Args:
            custom_weights: Full or partial weight table; merged over the defaults
        """
        self._weights = {**DEFAULT_PRIORITY_WEIGHTS, **(custom_weights or {})}

    @property
    def weights(self) -> Dict[str, float]:
        return dict(self._weights)

    def estimate_tokens(self, content: Optional[str]) -> int:
        return estimate_tokens(content)

    def calculate_priority(self, element: ContextElement) -> float:
        """
        Priority score for an element: its own weight, else the most specific
        matching weight-table entry, else DEFAULT_WEIGHT.
        """
        if element.weight is not None:
            return element.weight

        matches = [key for key in self._weights if self._type_matches(element.type, key)]
        if not matches:
            return DEFAULT_WEIGHT

        most_specific = max(matches, key=len)
        return self._weights[most_specific]

    def sort_key(self, element: ContextElement):
        """
        Sort key putting higher priority first, then more recent first.

        Elements without a timestamp rank after timestamped ones of equal
        priority; Python's stable sort keeps their input order.
        """
        has_timestamp = element.timestamp is not None
        return (
            -self.calculate_priority(element),
            0 if has_timestamp else 1,
            -element.timestamp if has_timestamp else 0,
        )

    def prioritize(
        self,
        elements: List[ContextElement],
        token_limit: int
    ) -> List[ContextElement]:
        """
        Select elements that fit within token_limit, most important first.

        Args:
            elements: Candidate elements (not modified)
            token_limit: Maximum total tokens

        Returns:
            Ordered subset of elements; a single truncated element when the
            top-ranked one alone exceeds the limit
        """
        if not elements:
            return []

        with_tokens = [
            element if element.tokens is not None
            else replace(element, tokens=estimate_tokens(element.content))
            for element in elements
        ]

        ranked = sorted(with_tokens, key=self.sort_key)

        result: List[ContextElement] = []
        total_tokens = 0

        for element in ranked:
            if total_tokens + element.tokens <= token_limit:
                result.append(element)
                total_tokens += element.tokens
                logger.debug(
                    f"Admitted '{element.type}' ({element.tokens} tokens, "
                    f"total {total_tokens}/{token_limit})"
                )
            elif not result:
                truncated = replace(
                    element,
                    content=truncate_to_tokens(element.content, token_limit),
                    tokens=max(0, token_limit),
                    truncated=True
                )
                logger.warning(
                    f"⚠ Highest priority element '{element.type}' "
                    f"({element.tokens} tokens) exceeds limit of {token_limit}. "
                    f"Truncating and returning it alone."
                )
                return [truncated]
            else:
                logger.debug(
                    f"Skipped '{element.type}' ({element.tokens} tokens): "
                    f"only {token_limit - total_tokens} remaining"
                )

        return result

    @staticmethod
    def _type_matches(element_type: str, key: str) -> bool:
        # "character" matches "character" and "character.skills", not "characters"
        return element_type == key or element_type.startswith(key + ".")
