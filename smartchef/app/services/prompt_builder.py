"""
Prompt construction for recipe generation.
"""

from typing import Iterable

from ..core.exceptions import EmptyIngredientsError
from ..models.recipe import IngredientEntry

INVALID_INGREDIENT_MARKER = "Invalid ingredient detected"

PROMPT_TEMPLATE = """\
Check if all the following are valid cooking ingredients: {ingredients}.

If **any** ingredient is invalid, reply ONLY with:
"❌ {marker}: [list invalid items]"

❗️Do NOT suggest a recipe or provide any further output if ingredients are invalid.

If all ingredients are valid, then:
- Provide a recipe title
- List ingredients
- Include numbered instructions
- List macros (Calories, Proteins, Carbs, Fats)"""


def format_ingredients(entries: Iterable[IngredientEntry]) -> str:
    parts = []
    for entry in entries:
        if not entry.name.strip():
            continue
        words = f"{entry.amount} {entry.unit} {entry.name}".split()
        parts.append(" ".join(words))
    return ", ".join(parts)


def build_recipe_prompt(entries: Iterable[IngredientEntry]) -> str:
    ingredients = format_ingredients(entries)
    if not ingredients:
        raise EmptyIngredientsError("At least one ingredient must be named")
    return PROMPT_TEMPLATE.format(ingredients=ingredients, marker=INVALID_INGREDIENT_MARKER)


def is_invalid_ingredient_reply(text: str) -> bool:
    """True when the model rejected the ingredient list instead of answering."""
    return INVALID_INGREDIENT_MARKER.lower() in text.lower()
