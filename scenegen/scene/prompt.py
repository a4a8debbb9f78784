"""
Scene prompt configuration.

The prompt is static data. Set ``SCENE_PROMPT_FILE`` to a text file to replace
the built-in template without touching code.
"""
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PROMPT_FILE = "SCENE_PROMPT_FILE"

DEFAULT_SCENE_PROMPT = """A cinematic scene inside a fast food restaurant at night.
Foreground: a lonely table with burgers and fries, and a smartphone shown large and sharp on the table, clearly displaying the uploaded anime/game character image.
A hand is reaching for food, symbolizing solitude.

Midground: in the blurred background, a couple is sitting together and kiss.
One of them is represented as a cosplayer version of the uploaded character:
– If the uploaded character is humanoid, show accurate cosplay with hairstyle, costume, and signature props.
– If the uploaded character is non-humanoid (mecha, creature, mascot, etc.), show a gijinka (humanized cosplay interpretation) that carries clear visual cues, costume colors, and props from the reference image (armor pieces, wings, ears, weapon, or iconic accessories).
The other person is an ordinary human, and they are showing intimate affection (kissing, holding hands, or sharing food).

Background: large glass windows, blurred neon city lights outside.
Mood: melancholic, bittersweet, ironic, cinematic shallow depth of field.

[reference: the uploaded image defines both the smartphone display and the cosplay design, with visible props emphasized]

Image size is 585px 1024px"""


def load_prompt() -> str:
    """
    Return the scene prompt, read from ``SCENE_PROMPT_FILE`` when it is set.

    Raises:
        FileNotFoundError: If the configured prompt file does not exist
        ValueError: If the configured prompt file is empty
    """
    prompt_path = os.getenv(ENV_PROMPT_FILE)
    if not prompt_path:
        return DEFAULT_SCENE_PROMPT

    path = Path(prompt_path)
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        prompt = f.read().strip()

    if not prompt:
        raise ValueError(f"Prompt file is empty: {path}")

    logger.info(f"Loaded scene prompt from {path} ({len(prompt)} chars)")
    return prompt
