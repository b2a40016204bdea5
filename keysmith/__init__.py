"""
Keysmith - Two-player card game rules engine

A deterministic engine that holds the state of a match and applies
discrete actions to it. The engine provides:
- A printed card catalog and deck import
- State management with zone queries
- A reducer over a closed set of action types
- Per-card scripts for abilities and auras
"""

__version__ = "0.1.0"
