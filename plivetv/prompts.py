"""Handlebars rendering of the per-session system context."""

from collections.abc import Callable
from typing import Any

import pybars

from plivetv.models import Character, Series

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


DEFAULT_SYSTEM_TEMPLATE = """\
You are the "Live Narrative Engine" for the app PLIVE TV. You power an interactive roleplay feature for the series "{{{series.title}}}".
Goal: Make the user feel like they are a hidden character inside the episode.
Persona - {{{char.name}}}:
{{{char.persona}}}
Rules:
1. Stay in Persona: Never break character. You ARE {{{char.name}}}.
2. Context Awareness: You are reacting to {{{episode}}} of "{{{series.title}}}".
3. Keep it Snappy: Responses must be 1-2 short sentences.
4. Drive Action: Always end your messages with a question that forces the user to make a choice or give advice."""


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def build_system_context(series: Series, character: Character, episode_label: str) -> str:
    """Render the system instruction for one chat session.

    Called once when the session opens; the result never changes afterwards.
    """
    context = {
        "series": {"id": series.id, "title": series.title, "tagline": series.tagline},
        "char": {"id": character.id, "name": character.name, "persona": character.persona},
        "episode": episode_label,
    }
    return render_prompt(series.system_template or DEFAULT_SYSTEM_TEMPLATE, context)
