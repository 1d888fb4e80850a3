"""Core domain models.

The feed engine, chat sessions and the catalog loader all operate on these
types. Pydantic is used for validation and serialisation at every data
boundary. Catalog models are frozen: a loaded series never changes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ChatRole = Literal["user", "model"]


class ChatMessage(BaseModel):
    """A single entry in a chat session's append-only history."""

    role: ChatRole
    text: str


class Character(BaseModel):
    """A fictional character the viewer can talk to."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    avatar_url: str = ""
    persona: str = ""
    accent_color: str = "#3b82f6"

    @property
    def initial(self) -> str:
        """Badge letter shown when the avatar image fails to load."""
        return self.name[:1].upper()


class Trigger(BaseModel):
    """One narrative branch offered on an episode."""

    model_config = ConfigDict(frozen=True)

    character: str  # Character.id
    label: str
    hook: str  # opening line the character speaks first


class Episode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    label: str
    url: str
    triggers: tuple[Trigger, ...] = ()


class Series(BaseModel):
    """A whole show: its characters and its ordered episodes."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    tagline: str = ""
    thumbnail_url: str = ""
    characters: tuple[Character, ...] = ()
    episodes: tuple[Episode, ...] = Field(min_length=1)
    system_template: str | None = None

    @model_validator(mode="after")
    def check_trigger_characters(self) -> Series:
        known = {c.id for c in self.characters}
        for ep in self.episodes:
            for trigger in ep.triggers:
                if trigger.character not in known:
                    raise ValueError(
                        f"Episode {ep.id} trigger {trigger.label!r} names unknown "
                        f"character {trigger.character!r}"
                    )
        return self

    def character(self, character_id: str) -> Character:
        for c in self.characters:
            if c.id == character_id:
                return c
        raise KeyError(character_id)
