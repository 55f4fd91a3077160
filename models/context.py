"""
Context Models - Plain records for prompt context assembly

World and character facts arrive from the world/character stores as JSON-like
dicts. These dataclasses give them a stable shape and convert back and forth
between the camelCase wire format and Python attributes.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class InvalidContextRequest(ValueError):
    """Raised when a context payload has the wrong structure."""


class PromptType(str, Enum):
    """Purpose of the prompt the context is built for"""
    NARRATIVE = "narrative"
    DECISION = "decision"
    SUMMARY = "summary"

    @classmethod
    def parse(cls, value: Any) -> Optional["PromptType"]:
        """Return the matching PromptType, or None for absent/unknown values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


def _require_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidContextRequest(f"{what} must be an object, got {type(value).__name__}")
    return value


def _list_of_dicts(data: Dict[str, Any], key: str, what: str) -> List[Dict[str, Any]]:
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidContextRequest(f"{what}.{key} must be a list")
    return [_require_dict(entry, f"{what}.{key}[]") for entry in raw]


def _coerce(record_cls, value):
    if value is None or isinstance(value, record_cls):
        return value
    return record_cls.from_dict(value)


def _drop_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None and v != []}


@dataclass(frozen=True)
class AttributeDefinition:
    id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttributeDefinition":
        return cls(
            id=str(data.get('id', '')),
            name=str(data.get('name') or ''),
            description=data.get('description')
        )


@dataclass(frozen=True)
class SkillDefinition:
    id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SkillDefinition":
        return cls(
            id=str(data.get('id', '')),
            name=str(data.get('name') or ''),
            description=data.get('description')
        )


@dataclass(frozen=True)
class CharacterAttribute:
    id: str
    name: str
    value: Any

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CharacterAttribute":
        # The character store spells the key attributeId
        return cls(
            id=str(data.get('id', data.get('attributeId', ''))),
            name=str(data.get('name') or ''),
            value=data.get('value')
        )


@dataclass(frozen=True)
class CharacterSkill:
    id: str
    name: str
    value: Any

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CharacterSkill":
        return cls(
            id=str(data.get('id', data.get('skillId', ''))),
            name=str(data.get('name') or ''),
            value=data.get('value')
        )


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    equipped: bool = False
    quantity: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InventoryItem":
        quantity = data.get('quantity')
        if quantity is not None and not isinstance(quantity, (int, float)):
            raise InvalidContextRequest("inventory quantity must be a number")
        return cls(
            id=str(data.get('id', '')),
            name=str(data.get('name') or ''),
            equipped=bool(data.get('equipped', False)),
            quantity=int(quantity) if quantity is not None else None
        )


@dataclass(frozen=True)
class WorldFacts:
    """World configuration as offered to the context builder"""
    id: str
    name: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    attributes: List[AttributeDefinition] = field(default_factory=list)
    skills: List[SkillDefinition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldFacts":
        data = _require_dict(data, "world")
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name'),
            genre=data.get('genre'),
            description=data.get('description'),
            attributes=[AttributeDefinition.from_dict(a) for a in _list_of_dicts(data, 'attributes', 'world')],
            skills=[SkillDefinition.from_dict(s) for s in _list_of_dicts(data, 'skills', 'world')]
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_empty({
            'id': self.id,
            'name': self.name,
            'genre': self.genre,
            'description': self.description,
            'attributes': [_drop_empty(vars(a)) for a in self.attributes],
            'skills': [_drop_empty(vars(s)) for s in self.skills],
        })


@dataclass(frozen=True)
class CharacterFacts:
    """Character state as offered to the context builder"""
    id: str
    name: Optional[str] = None
    level: Optional[int] = None
    description: Optional[str] = None
    attributes: List[CharacterAttribute] = field(default_factory=list)
    skills: List[CharacterSkill] = field(default_factory=list)
    inventory: List[InventoryItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CharacterFacts":
        data = _require_dict(data, "character")
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name'),
            level=data.get('level'),
            description=data.get('description'),
            attributes=[CharacterAttribute.from_dict(a) for a in _list_of_dicts(data, 'attributes', 'character')],
            skills=[CharacterSkill.from_dict(s) for s in _list_of_dicts(data, 'skills', 'character')],
            inventory=[InventoryItem.from_dict(i) for i in _list_of_dicts(data, 'inventory', 'character')]
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_empty({
            'id': self.id,
            'name': self.name,
            'level': self.level,
            'description': self.description,
            'attributes': [vars(a) for a in self.attributes],
            'skills': [vars(s) for s in self.skills],
            'inventory': [_drop_empty(vars(i)) for i in self.inventory],
        })


@dataclass
class ContextElement:
    """
    One typed piece of candidate context.

    `type` is dot-hierarchical ("character.attributes"). `tokens` is filled in
    lazily by the prioritizer, `weight` falls back to the weight table and
    `truncated` is only set on the single-oversized-element path.
    """
    type: str
    content: str
    tokens: Optional[int] = None
    weight: Optional[float] = None
    timestamp: Optional[int] = None  # ms epoch, higher = more recent
    truncated: bool = False


@dataclass
class ContextRequest:
    """Caller input for one assembly call"""
    world: Optional[WorldFacts] = None
    character: Optional[CharacterFacts] = None
    recent_events: List[str] = field(default_factory=list)  # oldest first
    current_situation: Optional[str] = None
    prompt_type: Optional[PromptType] = None
    token_limit: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContextRequest":
        """
        Build a request from the camelCase JSON shape.

        Args:
            data: Request payload

        Returns:
            ContextRequest

        Raises:
            InvalidContextRequest: If a field has the wrong structure
        """
        data = _require_dict(data, "request")

        world = data.get('world')
        character = data.get('character')

        events = data.get('recentEvents')
        if events is None:
            events = []
        if not isinstance(events, list) or not all(isinstance(e, str) for e in events):
            raise InvalidContextRequest("recentEvents must be a list of strings")

        situation = data.get('currentSituation')
        if situation is not None and not isinstance(situation, str):
            raise InvalidContextRequest("currentSituation must be a string")

        token_limit = data.get('tokenLimit')
        if token_limit is not None and (isinstance(token_limit, bool) or not isinstance(token_limit, int)):
            raise InvalidContextRequest("tokenLimit must be an integer")

        return cls(
            world=_coerce(WorldFacts, world),
            character=_coerce(CharacterFacts, character),
            recent_events=list(events),
            current_situation=situation,
            prompt_type=PromptType.parse(data.get('promptType')),
            token_limit=token_limit
        )

    def raw_dump(self) -> str:
        """Structural dump of the offered material, used as the size baseline."""
        payload: Dict[str, Any] = {}
        if self.world:
            payload['world'] = self.world.to_dict()
        if self.character:
            payload['character'] = self.character.to_dict()
        if self.recent_events:
            payload['recentEvents'] = self.recent_events
        if self.current_situation:
            payload['currentSituation'] = self.current_situation
        if not payload:
            return ""
        return json.dumps(payload, default=str)


@dataclass
class ContextResult:
    context: str
    estimated_token_count: int
    final_token_count: int
    context_retention_percentage: float
    # Diagnostics, not part of the wire shape
    included_types: List[str] = field(default_factory=list)
    dropped_count: int = 0
    was_truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'context': self.context,
            'estimatedTokenCount': self.estimated_token_count,
            'finalTokenCount': self.final_token_count,
            'contextRetentionPercentage': self.context_retention_percentage,
        }
