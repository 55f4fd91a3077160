"""
Tests for weighted prioritization under a token limit.

Tests cover:
- Longest-prefix weight lookup and custom weights
- Ordering by priority, then recency, then input order
- Greedy admission with skipping
- Single oversized element truncation
"""

import logging

from models.context import ContextElement
from services.context_prioritizer import DEFAULT_PRIORITY_WEIGHTS, ContextPrioritizer


class TestCalculatePriority:
    """Test priority scoring."""

    def test_explicit_weight_wins(self):
        prioritizer = ContextPrioritizer()

        assert prioritizer.calculate_priority(ContextElement(type='world', content='x', weight=7)) == 7
        assert prioritizer.calculate_priority(ContextElement(type='world', content='x', weight=0)) == 0

    def test_most_specific_prefix_wins(self):
        prioritizer = ContextPrioritizer()

        assert prioritizer.calculate_priority(ContextElement(type='character.current_state.mood', content='x')) == 5
        assert prioritizer.calculate_priority(ContextElement(type='character.backstory', content='x')) == 1
        assert prioritizer.calculate_priority(ContextElement(type='character.relationships', content='x')) == 4

    def test_same_level_in_hierarchy_scores_equal(self):
        prioritizer = ContextPrioritizer()

        strength = prioritizer.calculate_priority(ContextElement(type='character.attributes.strength', content='x'))
        charisma = prioritizer.calculate_priority(ContextElement(type='character.attributes.charisma', content='x'))

        assert strength == charisma == 4

    def test_unmatched_type_defaults_to_one(self):
        prioritizer = ContextPrioritizer()

        assert prioritizer.calculate_priority(ContextElement(type='situation', content='x')) == 1
        assert prioritizer.calculate_priority(ContextElement(type='characters', content='x')) == 1

    def test_custom_weights_merge_over_defaults(self):
        prioritizer = ContextPrioritizer({'character.inventory': 5, 'lore': 2})

        assert prioritizer.weights['character.inventory'] == 5
        assert prioritizer.weights['lore'] == 2
        assert prioritizer.weights['world.rules'] == DEFAULT_PRIORITY_WEIGHTS['world.rules']

    def test_weights_property_is_a_copy(self):
        prioritizer = ContextPrioritizer()
        prioritizer.weights['event'] = 99

        assert prioritizer.calculate_priority(ContextElement(type='event', content='x')) == 3


class TestOrdering:
    """Test sort order of admitted elements."""

    def test_current_state_before_backstory(self):
        elements = [
            ContextElement(type='character.backstory', content='Born in a village...', weight=1),
            ContextElement(type='character.current_state', content='Health: 50%', weight=3)
        ]

        result = ContextPrioritizer().prioritize(elements, 50)

        assert [e.type for e in result] == ['character.current_state', 'character.backstory']

    def test_recent_events_first(self):
        elements = [
            ContextElement(type='event', content='Fought dragon', timestamp=1_000),
            ContextElement(type='event', content='Found treasure', timestamp=5_000)
        ]

        result = ContextPrioritizer().prioritize(elements, 100)

        assert result[0].content == 'Found treasure'

    def test_custom_weights_reorder(self):
        prioritizer = ContextPrioritizer({'character.inventory': 5, 'world.description': 1})
        elements = [
            ContextElement(type='world.description', content='Fantasy realm'),
            ContextElement(type='character.inventory', content='Sword')
        ]

        result = prioritizer.prioritize(elements, 100)

        assert result[0].type == 'character.inventory'

    def test_equal_priority_without_timestamps_keeps_input_order(self):
        elements = [ContextElement(type='lore', content=c) for c in ('a', 'b', 'c')]

        result = ContextPrioritizer().prioritize(elements, 100)

        assert [e.content for e in result] == ['a', 'b', 'c']

    def test_timestamped_elements_rank_before_untimed_peers(self):
        elements = [
            ContextElement(type='event', content='untimed'),
            ContextElement(type='event', content='timed', timestamp=1)
        ]

        result = ContextPrioritizer().prioritize(elements, 100)

        assert [e.content for e in result] == ['timed', 'untimed']


class TestTokenLimit:
    """Test admission under the token budget."""

    def test_character_beats_world_when_both_cannot_fit(self):
        elements = [
            ContextElement(type='world', content='A' * 400, tokens=100),
            ContextElement(type='character', content='B' * 200, tokens=50)
        ]

        result = ContextPrioritizer().prioritize(elements, 75)

        assert len(result) == 1
        assert result[0].type == 'character'
        assert result[0].truncated is False

    def test_rules_kept_over_history(self):
        elements = [
            ContextElement(type='world.history', content='Founded long ago', tokens=30),
            ContextElement(type='world.rules', content='Magic requires mana', tokens=30)
        ]

        result = ContextPrioritizer().prioritize(elements, 40)

        assert [e.type for e in result] == ['world.rules']

    def test_skips_oversized_and_continues(self):
        elements = [
            ContextElement(type='a', content='first', tokens=60, weight=5),
            ContextElement(type='b', content='second', tokens=50, weight=4),
            ContextElement(type='c', content='third', tokens=30, weight=3)
        ]

        result = ContextPrioritizer().prioritize(elements, 100)

        assert [e.type for e in result] == ['a', 'c']

    def test_missing_tokens_are_estimated(self):
        elements = [ContextElement(type='event', content='Hello, brave new world')]

        result = ContextPrioritizer().prioritize(elements, 100)

        assert result[0].tokens == 4
        # Input is left untouched
        assert elements[0].tokens is None

    def test_empty_input(self):
        assert ContextPrioritizer().prioritize([], 100) == []


class TestSingleElementTruncation:
    """Test the fallback when the top element alone exceeds the budget."""

    def test_partial_content_with_ellipsis(self):
        elements = [ContextElement(type='world', content='Long description...', tokens=100)]

        result = ContextPrioritizer().prioritize(elements, 50)

        assert len(result) == 1
        assert '...' in result[0].content
        assert result[0].truncated is True
        assert result[0].tokens == 50

    def test_truncated_content_fits_limit(self):
        content = ' '.join(f'word{i}' for i in range(200))
        elements = [
            ContextElement(type='world', content=content, weight=5),
            ContextElement(type='event', content='small', weight=1)
        ]

        result = ContextPrioritizer().prioritize(elements, 20)

        assert len(result) == 1
        assert result[0].type == 'world'
        assert result[0].content.startswith('word0 word1')
        assert result[0].content.endswith('...')
        assert ContextPrioritizer().estimate_tokens(result[0].content) <= 20

    def test_zero_limit_degenerates_to_ellipsis(self):
        result = ContextPrioritizer().prioritize([ContextElement(type='event', content='hello world')], 0)

        assert result[0].content == '...'
        assert result[0].tokens == 0

    def test_truncation_logs_warning(self, caplog):
        elements = [ContextElement(type='world', content='one two three four', tokens=4)]

        with caplog.at_level(logging.WARNING, logger='services.context_prioritizer'):
            ContextPrioritizer().prioritize(elements, 2)

        assert any('exceeds limit' in record.message for record in caplog.records)
