"""Call of the Archons card scripts, one module per house."""

from . import brobnar, sanctum, shadows

MODULES = [brobnar, sanctum, shadows]

__all__ = ["MODULES", "brobnar", "sanctum", "shadows"]
