"""Call of the Archons - Shadows."""

from __future__ import annotations

from ...engine_core.state import GameState
from ..registry import CardScript, Hook, ScriptContext, ScriptRegistryBuilder
from ..helpers import controller, steal_amber


def _urchin_play(state: GameState, ctx: ScriptContext) -> None:
    steal_amber(state, controller(state, ctx.this_card), 1)


def register(builder: ScriptRegistryBuilder) -> None:
    builder.register("Urchin", CardScript(
        elusive=lambda: True,
        on_play=Hook(_urchin_play),
    ))
