"""Traffic simulator."""

from .sim import SCENARIO, Patient, Sim

__all__ = ["Patient", "SCENARIO", "Sim"]
