"""
Context Builder

Formats world and character facts into markdown sections for AI prompts.
Sections with no source data are left out entirely.
"""

from typing import List, Optional, Union

from models.context import (
    AttributeDefinition,
    CharacterAttribute,
    CharacterFacts,
    CharacterSkill,
    InventoryItem,
    SkillDefinition,
    WorldFacts,
)


WORLD_BANNER = "=== WORLD CONTEXT ==="
CHARACTER_BANNER = "=== CHARACTER CONTEXT ==="


class ContextBuilder:
    """
    Builds markdown context strings from world and character data.
    """

    def build_world_context(self, world: Optional[WorldFacts]) -> str:
        """
        Build world context: heading, genre, description, attributes and skills.

        Args:
            world: World facts (None yields "")

        Returns:
            Markdown string, empty when the world carries no displayable data
        """
        if world is None:
            return ""

        sections = []

        info = self._build_world_info(world)
        if info:
            sections.append(info)

        if world.attributes:
            sections.append(self._build_definition_list("## Attributes:", world.attributes))

        if world.skills:
            sections.append(self._build_definition_list("## Skills:", world.skills))

        return "\n\n".join(sections)

    def build_character_context(self, character: Optional[CharacterFacts]) -> str:
        """
        Build character context: heading, level, bio, attributes, skills and inventory.

        Args:
            character: Character facts (None yields "")

        Returns:
            Markdown string, empty when the character carries no displayable data
        """
        if character is None:
            return ""

        sections = []

        info = self._build_character_info(character)
        if info:
            sections.append(info)

        if character.attributes:
            sections.append(self._build_value_list("## Attributes:", character.attributes))

        if character.skills:
            sections.append(self._build_value_list("## Skills:", character.skills))

        if character.inventory:
            sections.append(self._build_inventory(character.inventory))

        return "\n\n".join(sections)

    def build_combined_context(
        self,
        world: Optional[WorldFacts],
        character: Optional[CharacterFacts]
    ) -> str:
        """
        Build world and character context under banner lines.

        Args:
            world: World facts
            character: Character facts

        Returns:
            Combined context string
        """
        lines = [
            WORLD_BANNER,
            self.build_world_context(world),
            "",
            CHARACTER_BANNER,
            self.build_character_context(character),
        ]
        return "\n".join(lines)

    def _build_world_info(self, world: WorldFacts) -> str:
        info = []

        if world.name:
            info.append(f"# World: {world.name}")

        if world.genre:
            info.append(f"Genre: {world.genre}")

        if world.description:
            info.append(world.description)

        return "\n".join(info)

    def _build_character_info(self, character: CharacterFacts) -> str:
        info = []

        if character.name:
            info.append(f"# Character: {character.name}")

        if character.level is not None:
            info.append(f"Level: {character.level}")

        if character.description:
            info.append(character.description)

        return "\n".join(info)

    def _build_definition_list(
        self,
        heading: str,
        definitions: Union[List[AttributeDefinition], List[SkillDefinition]]
    ) -> str:
        lines = [heading]
        for definition in definitions:
            suffix = f": {definition.description}" if definition.description else ""
            lines.append(f"- {definition.name}{suffix}")
        return "\n".join(lines)

    def _build_value_list(
        self,
        heading: str,
        entries: Union[List[CharacterAttribute], List[CharacterSkill]]
    ) -> str:
        lines = [heading]
        for entry in entries:
            # A missing value shows just the name
            suffix = f": {entry.value}" if entry.value is not None else ""
            lines.append(f"- {entry.name}{suffix}")
        return "\n".join(lines)

    def _build_inventory(self, inventory: List[InventoryItem]) -> str:
        lines = ["## Key Items:"]

        for item in inventory:
            item_text = f"- {item.name}"

            if item.equipped:
                item_text += " (equipped)"
            elif item.quantity and item.quantity > 1:
                item_text += f" x{item.quantity}"

            lines.append(item_text)

        return "\n".join(lines)
