"""
Horizon package: REST client, typed records, stroop amounts and network stats.
"""

from stellar_explorer.horizon.client import HorizonClient  # noqa: F401

__all__ = ["HorizonClient"]
