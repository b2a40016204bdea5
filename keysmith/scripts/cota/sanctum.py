"""Call of the Archons - Sanctum."""

from __future__ import annotations

from ...engine_core.state import GameState, Creature
from ...engine_core import queries
from ..registry import CardScript, ScriptContext, ScriptRegistryBuilder


def _protect_the_weak_aura(state: GameState, ctx: ScriptContext) -> None:
    host = queries.find_host(state, ctx.this_card.id)
    if isinstance(host, Creature):
        host.bonus_armor += 1
        host.granted_taunt = True


def register(builder: ScriptRegistryBuilder) -> None:
    builder.register("Protect the Weak", CardScript(
        static_effect=_protect_the_weak_aura,
    ))
