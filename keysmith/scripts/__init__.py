"""
Card Scripts - Per-card hooks layered over catalog defaults.

A script is looked up by the card's script key. Bundled card modules live
under `keysmith.scripts.cota`; `default_registry()` collects them once.
"""

from .registry import (
    CardScript,
    Hook,
    ScriptContext,
    ScriptRegistry,
    ScriptRegistryBuilder,
    DuplicateScriptError,
    default_registry,
)

__all__ = [
    "CardScript",
    "Hook",
    "ScriptContext",
    "ScriptRegistry",
    "ScriptRegistryBuilder",
    "DuplicateScriptError",
    "default_registry",
]
