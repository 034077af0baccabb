"""
Line-oriented parser for AI-generated recipe text.

The model is asked for a title, an ingredient list, numbered instructions and
macros. Replies are loosely structured, so the parser walks the text once,
switching section on header lines and collecting everything else into the
active section. Unrecognized lines are kept as description, never rejected.
"""

import re
from enum import Enum
from typing import List

from ..models.recipe import DEFAULT_TITLE, RecipeRecord


class Section(Enum):
    NONE = "none"
    INGREDIENTS = "ingredients"
    INSTRUCTIONS = "instructions"
    MACROS = "macros"


class RecipeParser:
    title_prefix = "recipe:"
    ingredients_prefix = "ingredients:"
    instructions_prefix = "instructions:"
    allergies_prefix = "allergies:"
    macros_pattern = re.compile(r"macros", re.I)
    calories_pattern = re.compile(r"calories:\s*(\d+)", re.I)
    step_pattern = re.compile(r"^\d+\.")

    @classmethod
    def parse(cls, raw: str, default_title: str = DEFAULT_TITLE) -> RecipeRecord:
        title = default_title
        section = Section.NONE
        description: List[str] = []
        ingredients: List[str] = []
        macros: List[str] = []
        steps: List[str] = []
        allergies: List[str] = []
        calories = 0

        for line in raw.splitlines():
            trimmed = line.strip()
            lowered = trimmed.lower()

            if lowered.startswith(cls.title_prefix):
                title = trimmed[len(cls.title_prefix):]
                continue
            if lowered.startswith(cls.ingredients_prefix):
                section = Section.INGREDIENTS
                continue
            if lowered.startswith(cls.instructions_prefix):
                section = Section.INSTRUCTIONS
                continue
            if cls.macros_pattern.search(trimmed):
                section = Section.MACROS
                continue
            if section is Section.MACROS and not trimmed:
                section = Section.NONE
                continue
            if lowered.startswith(cls.allergies_prefix):
                allergies = cls._split_allergies(trimmed[len(cls.allergies_prefix):])
                continue

            # Not a header: calories are picked up in any section and the
            # line still falls through to accumulation.
            match = cls.calories_pattern.search(trimmed)
            if match:
                calories = int(match.group(1))

            if section is Section.INGREDIENTS:
                ingredients.append(trimmed)
            elif section is Section.INSTRUCTIONS:
                if cls.step_pattern.match(trimmed):
                    steps.append(trimmed)
            elif section is Section.MACROS:
                macros.append(trimmed)
            else:
                description.append(trimmed)

        ingredients_text = "\n".join(ingredients).strip()
        return RecipeRecord(
            title=title.strip(),
            description="\n".join(description).strip(),
            ingredients=ingredients_text,
            steps=steps,
            macros="\n".join(macros).strip(),
            allergies=allergies,
            calories=calories,
            measurements=ingredients_text,
        )

    @staticmethod
    def _split_allergies(remainder: str) -> List[str]:
        return [item.strip() for item in remainder.split(",")]

    @classmethod
    def format(cls, record: RecipeRecord) -> str:
        """Render a record in the sectioned layout that ``parse`` reads."""
        blocks = [f"Recipe: {record.title}"]
        if record.description:
            blocks[0] += "\n" + record.description
        if record.ingredients:
            blocks.append("Ingredients:\n" + record.ingredients)
        if record.steps:
            blocks.append("Instructions:\n" + "\n".join(record.steps))
        if record.macros:
            blocks.append("Macros:\n" + record.macros)
        elif record.calories:
            blocks.append(f"Macros:\nCalories: {record.calories}")
        if record.allergies:
            blocks.append("Allergies: " + ", ".join(record.allergies))

        text = "\n\n".join(blocks)
        if cls.parse(text).calories != record.calories:
            # Unnumbered lines under Instructions are dropped, so this line
            # only sets the calorie count.
            text += f"\n\nInstructions:\nCalories: {record.calories}"
        return text
