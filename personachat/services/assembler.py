"""
Builds the role/content message lists sent to the completion provider.

Nothing here touches the database: callers pass in the character and its
messages already ordered by (created_at, id).
"""
from typing import Dict, List, Sequence

from personachat.core.errors import NoPriorUserMessage, NotFound

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."

# (attribute, heading) appended after the base prompt, in this order
_SYSTEM_SECTIONS = (
    ("personality", "Personality"),
    ("backstory", "Backstory"),
    ("custom_instructions", "Additional Instructions"),
)

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "build_system_prompt",
    "build_generation_messages",
    "assemble_regeneration_prefix",
]


def build_system_prompt(character) -> str:
    """
    Concatenate the character's prompt fields into a single system message.
    Empty fields are skipped entirely, headings included.
    """
    parts = [character.system_prompt or DEFAULT_SYSTEM_PROMPT]
    for attr, heading in _SYSTEM_SECTIONS:
        value = getattr(character, attr, None)
        if value:
            parts.append(f"{heading}:\n{value}")
    return "\n\n".join(parts)


def _as_pairs(character, messages: Sequence) -> List[Dict[str, str]]:
    pairs = [{"role": "system", "content": build_system_prompt(character)}]
    pairs.extend({"role": m.role, "content": m.content} for m in messages)
    return pairs


def build_generation_messages(character, messages: Sequence) -> List[Dict[str, str]]:
    """System message followed by the whole history, for a fresh reply."""
    return _as_pairs(character, messages)


def assemble_regeneration_prefix(character, messages: Sequence, target_id: int) -> List[Dict[str, str]]:
    """
    Rebuild the prompt that produced the assistant message ``target_id``:
    the system message plus every message up to and including the last user
    message before the target. Later messages are left out.

    Raises:
        NotFound: ``target_id`` is not in ``messages`` or is not an assistant message.
        NoPriorUserMessage: no user message precedes the target.
    """
    index = next((i for i, m in enumerate(messages) if m.id == target_id), None)
    if index is None or messages[index].role != "assistant":
        raise NotFound("Message not found")

    for j in range(index - 1, -1, -1):
        if messages[j].role == "user":
            return _as_pairs(character, messages[: j + 1])

    raise NoPriorUserMessage()
