"""Shared pytest fixtures for context assembly tests.

Fixtures defined here are available to every test module under tests/.
"""

import pytest

from app import create_app
from models.context import CharacterFacts, WorldFacts

FIXED_NOW_MS = 1_700_000_000_000


@pytest.fixture
def world_payload():
    """World record as the world store serves it."""
    return {
        'id': 'world-1',
        'name': 'Eldoria',
        'genre': 'fantasy',
        'description': 'A magical realm',
        'attributes': [
            {'id': 'attr-1', 'name': 'Strength', 'description': 'Physical power'}
        ],
        'skills': [
            {'id': 'skill-1', 'name': 'Swordsmanship', 'description': 'Blade mastery'}
        ]
    }


@pytest.fixture
def character_payload():
    """Character record as the character store serves it."""
    return {
        'id': 'char-1',
        'name': 'Hero',
        'level': 5,
        'description': 'Brave adventurer',
        'attributes': [
            {'attributeId': 'attr-1', 'name': 'Strength', 'value': 8}
        ],
        'skills': [
            {'skillId': 'skill-1', 'name': 'Swordsmanship', 'value': 3}
        ]
    }


@pytest.fixture
def world(world_payload):
    return WorldFacts.from_dict(world_payload)


@pytest.fixture
def character(character_payload):
    return CharacterFacts.from_dict(character_payload)


@pytest.fixture
def fixed_clock():
    """Millisecond clock frozen at FIXED_NOW_MS."""
    return lambda: FIXED_NOW_MS


@pytest.fixture
def app():
    return create_app('testing')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def expected_world():
    """Markdown produced for the world fixture."""
    return (
        "# World: Eldoria\n"
        "Genre: fantasy\n"
        "A magical realm\n"
        "\n"
        "## Attributes:\n"
        "- Strength: Physical power\n"
        "\n"
        "## Skills:\n"
        "- Swordsmanship: Blade mastery"
    )


@pytest.fixture
def expected_character():
    """Markdown produced for the character fixture."""
    return (
        "# Character: Hero\n"
        "Level: 5\n"
        "Brave adventurer\n"
        "\n"
        "## Attributes:\n"
        "- Strength: 8\n"
        "\n"
        "## Skills:\n"
        "- Swordsmanship: 3"
    )
