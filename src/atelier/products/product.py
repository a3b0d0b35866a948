"""
Product Model

A unit of work in the atelier and its skill-completion state, plus the text
codec used to carry it inside message payloads:

    Produit1,{skill1=true, skill2=false, skill3=false}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

SKILL_PREFIX = "skill"

# Characters that would break the name,{k=v, k=v} framing
_RESERVED = (",", "=", "{", "}")


class DecodeError(ValueError):
    """Raised when a serialized product cannot be parsed."""


def skill_name(index: int) -> str:
    """Name of the index-th skill (1-based)."""
    return f"{SKILL_PREFIX}{index}"


@dataclass
class Product:
    """
    A product moving through the atelier.

    Skill keys are fixed at construction. Values only move from False to True.
    """

    name: str
    skills: dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("product name cannot be empty")
        if "," in self.name:
            raise ValueError(f"product name cannot contain ',', got {self.name!r}")
        for key in self.skills:
            if not key or key != key.strip() or any(ch in key for ch in _RESERVED):
                raise ValueError(f"invalid skill name {key!r}")

    @classmethod
    def new(cls, name: str, skill_count: int) -> Product:
        """Build a product requiring skill1..skillN, none applied."""
        if skill_count < 0:
            raise ValueError(f"skill_count must be >= 0, got {skill_count}")
        return cls(name, {skill_name(i): False for i in range(1, skill_count + 1)})

    def required_skills(self) -> list[str]:
        """Skills not applied yet, in insertion order."""
        return [skill for skill, applied in self.skills.items() if not applied]

    def apply_skill(self, skill: str) -> None:
        """Mark a skill applied. Unknown skills are ignored."""
        if skill in self.skills:
            self.skills[skill] = True
            logger.debug("Skill %s applied to %s", skill, self.name)

    def is_complete(self) -> bool:
        return all(self.skills.values())

    def serialize(self) -> str:
        pairs = ", ".join(
            f"{skill}={'true' if applied else 'false'}" for skill, applied in self.skills.items()
        )
        return f"{self.name},{{{pairs}}}"

    @classmethod
    def deserialize(cls, data: str) -> Product:
        """
        Rebuild a product from serialize() output.

        Raises:
            DecodeError: if the text is not `name,{key=bool, ...}`
        """
        name, sep, body = data.partition(",")
        if not sep:
            raise DecodeError(f"missing ',' after product name in {data!r}")

        body = body.strip()
        if not (body.startswith("{") and body.endswith("}")):
            raise DecodeError(f"skill map must be wrapped in braces, got {body!r}")
        body = body[1:-1].strip()

        skills: dict[str, bool] = {}
        if body:
            for pair in body.split(", "):
                key, eq, value = pair.partition("=")
                key = key.strip()
                value = value.strip().lower()
                if not eq or not key:
                    raise DecodeError(f"malformed skill entry {pair!r}")
                if value not in ("true", "false"):
                    raise DecodeError(f"skill {key} has non-boolean value {value!r}")
                skills[key] = value == "true"

        try:
            return cls(name, skills)
        except ValueError as e:
            raise DecodeError(str(e)) from e
