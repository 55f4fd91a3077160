"""
Context Manager for AI Prompts

Assembles world, character, recent events and the current situation into one
markdown context string under a token budget.

Key features:
- Prompt-type dependent weighting (narrative, decision, summary)
- Priority-based element admission via ContextPrioritizer
- Fixed section order in the output regardless of admission order
- Re-check after grouping, dropping lowest priority elements until it fits
- Retention metrics comparing raw offered material with the final context
"""

import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from models.context import ContextElement, ContextRequest, ContextResult, PromptType
from services.context_builder import ContextBuilder
from services.context_prioritizer import ContextPrioritizer
from services.token_estimator import estimate_tokens, truncate_to_tokens

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIMIT = 1000
DEFAULT_PROMPT_WEIGHT = 3

# Output order of element types
SECTION_ORDER = ("world", "character", "event", "situation")

EVENTS_HEADING = "## Recent Events:"
SITUATION_PREFIX = "Current Situation: "

PROMPT_TYPE_WEIGHTS: Dict[PromptType, Dict[str, int]] = {
    PromptType.NARRATIVE: {"world": 5, "character": 4, "event": 3, "situation": 3},
    PromptType.DECISION: {"world": 4, "character": 5, "event": 3, "situation": 5},
    PromptType.SUMMARY: {"world": 4, "character": 3, "event": 5, "situation": 3},
}

# Timestamp offsets (ms) relative to assembly time
WORLD_OFFSET = -1000
CHARACTER_OFFSET = -500
SITUATION_OFFSET = 100
EVENT_SPACING = 100


def _now_ms() -> int:
    return int(time.time() * 1000)


class ContextAssembler:
    """
    Builds prompt context with prioritization and truncation.

    Stateless per call; the weight table is fixed at construction.
    """

    def __init__(
        self,
        priority_weights: Optional[Mapping[str, float]] = None,
        default_token_limit: int = DEFAULT_TOKEN_LIMIT,
        builder: Optional[ContextBuilder] = None,
        clock: Callable[[], int] = _now_ms
    ):
        """
        Initialize context assembler.

        Args:
            priority_weights: Overrides merged over the default weight table
            default_token_limit: Budget used when a request has no tokenLimit
            builder: Formatter for world/character sections
            clock: Millisecond clock used for element timestamps
        """
        self.builder = builder or ContextBuilder()
        self.prioritizer = ContextPrioritizer(priority_weights)
        self.default_token_limit = default_token_limit
        self._clock = clock

    @staticmethod
    def weight_for_prompt_type(element_type: str, prompt_type: Any = None) -> int:
        """
        Weight of an element type for a prompt purpose.

        Unknown or missing prompt types weigh every type the same.
        """
        parsed = PromptType.parse(prompt_type)
        if parsed is None:
            return DEFAULT_PROMPT_WEIGHT
        return PROMPT_TYPE_WEIGHTS[parsed].get(element_type, DEFAULT_PROMPT_WEIGHT)

    def build_elements(self, request: ContextRequest) -> List[ContextElement]:
        """
        Convert a request into weighted, timestamped context elements.

        Categories whose formatted content is empty are not offered.
        """
        now = self._clock()
        prompt_type = request.prompt_type
        elements: List[ContextElement] = []

        if request.world:
            content = self.builder.build_world_context(request.world)
            if content:
                elements.append(ContextElement(
                    type="world",
                    content=content,
                    weight=self.weight_for_prompt_type("world", prompt_type),
                    timestamp=now + WORLD_OFFSET
                ))

        if request.character:
            content = self.builder.build_character_context(request.character)
            if content:
                elements.append(ContextElement(
                    type="character",
                    content=content,
                    weight=self.weight_for_prompt_type("character", prompt_type),
                    timestamp=now + CHARACTER_OFFSET
                ))

        # Caller order is chronological: later events are more recent
        for index, event in enumerate(request.recent_events):
            elements.append(ContextElement(
                type="event",
                content=f"- {event}",
                weight=self.weight_for_prompt_type("event", prompt_type),
                timestamp=now + index * EVENT_SPACING
            ))

        if request.current_situation:
            elements.append(ContextElement(
                type="situation",
                content=f"{SITUATION_PREFIX}{request.current_situation}",
                weight=self.weight_for_prompt_type("situation", prompt_type),
                timestamp=now + SITUATION_OFFSET
            ))

        return elements

    def combine(self, elements: List[ContextElement]) -> str:
        """
        Join elements into the final string, grouped by type in SECTION_ORDER.

        Events are listed oldest first under one heading.
        """
        sections = []

        for section_type in SECTION_ORDER:
            group = [e for e in elements if e.type == section_type]
            if not group:
                continue

            if section_type == "event":
                group.sort(key=lambda e: e.timestamp or 0)
                lines = [EVENTS_HEADING] + [e.content for e in group]
                sections.append("\n".join(lines))
            else:
                sections.append("\n\n".join(e.content for e in group))

        return "\n\n".join(sections)

    def assemble(self, request: ContextRequest) -> ContextResult:
        """
        Assemble final context, truncating if necessary.

        Args:
            request: World, character, events, situation, prompt type and limit

        Returns:
            ContextResult with the context string and size metrics
        """
        token_limit = request.token_limit if request.token_limit is not None else self.default_token_limit

        estimated_token_count = estimate_tokens(request.raw_dump())

        elements = self.build_elements(request)
        offered = len(elements)

        selected = self.prioritizer.prioritize(elements, token_limit)
        was_truncated = any(e.truncated for e in selected)

        context = self.combine(selected)
        context, selected = self._drop_until_fits(context, selected, token_limit)

        if estimate_tokens(context) > token_limit:
            logger.warning(
                f"⚠ Context still over budget with a single element "
                f"({estimate_tokens(context)}/{token_limit} tokens). Truncating final context."
            )
            context = truncate_to_tokens(context, token_limit)
            was_truncated = True

        final_token_count = estimate_tokens(context)

        if estimated_token_count > 0:
            retention = min(100.0, final_token_count / estimated_token_count * 100)
        else:
            retention = 100.0

        dropped = offered - len(selected)

        logger.info(
            f"✓ Context assembled: {final_token_count}/{token_limit} tokens, "
            f"{len(selected)}/{offered} elements, "
            f"retention {retention:.1f}% of {estimated_token_count} offered"
        )

        return ContextResult(
            context=context,
            estimated_token_count=estimated_token_count,
            final_token_count=final_token_count,
            context_retention_percentage=retention,
            included_types=[e.type for e in selected],
            dropped_count=dropped,
            was_truncated=was_truncated
        )

    def generate_context(self, **options) -> str:
        """
        Assemble from keyword options (camelCase, as in the JSON payload)
        and return only the context string.
        """
        return self.assemble(ContextRequest.from_dict(options)).context

    def _drop_until_fits(
        self,
        context: str,
        selected: List[ContextElement],
        token_limit: int
    ):
        """
        Drop the lowest priority element and recombine until the grouped
        context fits. Stops at one remaining element; bounded by element count.
        """
        remaining = list(selected)

        for _ in range(len(selected)):
            if estimate_tokens(context) <= token_limit or len(remaining) <= 1:
                break

            victim = min(remaining, key=self._removal_key)
            remaining = [e for e in remaining if e is not victim]
            context = self.combine(remaining)

            logger.info(
                f"Dropped '{victim.type}' after grouping overhead: "
                f"{estimate_tokens(context)}/{token_limit} tokens"
            )

        return context, remaining

    def _removal_key(self, element: ContextElement):
        # Lowest priority first, oldest first among equals
        timestamp = element.timestamp if element.timestamp is not None else float("-inf")
        return (self.prioritizer.calculate_priority(element), timestamp)


def build_prompt_context(
    options: Dict[str, Any],
    priority_weights: Optional[Mapping[str, float]] = None
) -> ContextResult:
    """
    One-shot helper: assemble context for a JSON-shaped options dict.

    Args:
        options: ContextRequest payload (camelCase keys)
        priority_weights: Optional weight overrides

    Returns:
        ContextResult
    """
    assembler = ContextAssembler(priority_weights)
    return assembler.assemble(ContextRequest.from_dict(options))
