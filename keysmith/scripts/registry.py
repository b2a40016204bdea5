"""
Card Script Registry - Per-card overrides of default behavior.

Each printed card may have one CardScript, keyed by the card's script key
(lowercased title with spaces replaced by hyphens). Every hook is optional;
a card without a script simply has catalog-default behavior.

The registry is built once through a ScriptRegistryBuilder and is
read-only afterwards. The reducer receives it by injection.

Registration:
    builder = ScriptRegistryBuilder()

    @builder.script("Headhunter")
    def headhunter() -> CardScript:
        return CardScript(power=lambda: 5, fight=Hook(gain_one))

    registry = builder.build()
    registry.for_card(card)   # -> CardScript | None
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, TYPE_CHECKING

from ..catalog.card import Card, normalize_title

if TYPE_CHECKING:
    from ..engine_core.state import GameState, CardInGame
    from ..engine_core.action import Action


@dataclass
class ScriptContext:
    """
    Context passed to every hook.

    `this_card` is the instance whose script is running. `action` is set
    for after-action hooks, together with `controller_id`, the player who
    played the card. `target` is set for hooks aimed at another card (the
    defender in a fight).
    """
    this_card: CardInGame
    action: Action | None = None
    target: CardInGame | None = None
    controller_id: str | None = None


Perform = Callable[["GameState", ScriptContext], None]


@dataclass(frozen=True)
class Hook:
    """A triggered ability: perform(state, ctx) mutates the live state."""
    perform: Perform


@dataclass(frozen=True)
class CardScript:
    """
    Capability record for one printed card.

    Keyword predicates and power override are queried by the static
    effect pass. `amber` and the hooks are invoked by action handlers.
    """
    power: Callable[[], int] | None = None
    elusive: Callable[[], bool] | None = None
    skirmish: Callable[[], bool] | None = None
    taunt: Callable[[], bool] | None = None

    amber: Callable[["GameState", ScriptContext], int] | None = None
    static_effect: Perform | None = None

    on_play: Hook | None = None
    fight: Hook | None = None
    destroyed: Hook | None = None
    run_after_any_action_this_turn: Hook | None = None


class DuplicateScriptError(ValueError):
    """Raised when two scripts register under the same key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"A script is already registered for {key!r}")


class ScriptRegistry(Mapping[str, CardScript]):
    """
    Immutable mapping from script key to CardScript.

    Safe to share across matches: nothing can be added or removed after
    construction.
    """

    def __init__(self, scripts: Mapping[str, CardScript] | None = None):
        self._scripts = MappingProxyType(dict(scripts or {}))

    def __getitem__(self, key: str) -> CardScript:
        return self._scripts[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scripts)

    def __len__(self) -> int:
        return len(self._scripts)

    def __repr__(self):
        return f"ScriptRegistry({len(self)} scripts)"

    def for_card(self, card: Card) -> CardScript | None:
        """Look up by the card's precomputed script key."""
        return self._scripts.get(card.script_key)

    def get(self, title: str, default: CardScript | None = None) -> CardScript | None:
        """Look up by display title or script key; both normalize to the same key."""
        return self._scripts.get(normalize_title(title), default)

    def for_title(self, title: str) -> CardScript | None:
        return self.get(title)


class ScriptRegistryBuilder:
    """Collects scripts, then freezes them into a ScriptRegistry."""

    def __init__(self):
        self._scripts: dict[str, CardScript] = {}

    def register(self, title: str, script: CardScript) -> CardScript:
        key = normalize_title(title)
        if key in self._scripts:
            raise DuplicateScriptError(key)
        self._scripts[key] = script
        return script

    def script(self, title: str) -> Callable[[Callable[[], CardScript]], Callable[[], CardScript]]:
        """Decorator: register the CardScript returned by a factory function."""
        def decorator(factory: Callable[[], CardScript]) -> Callable[[], CardScript]:
            self.register(title, factory())
            return factory
        return decorator

    def include(self, module: Any) -> ScriptRegistryBuilder:
        """Pull in a card module exposing `register(builder)`."""
        module.register(self)
        return self

    def build(self) -> ScriptRegistry:
        return ScriptRegistry(self._scripts)


@lru_cache(maxsize=1)
def default_registry() -> ScriptRegistry:
    """The registry of every bundled card module, built once per process."""
    from . import cota

    builder = ScriptRegistryBuilder()
    for module in cota.MODULES:
        builder.include(module)
    return builder.build()
