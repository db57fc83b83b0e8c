"""Discovery orchestration and recurring automation."""

from beamwatch.orchestrator.runner import DiscoveryRunner
from beamwatch.orchestrator.scheduler import AutomationScheduler

__all__ = ["AutomationScheduler", "DiscoveryRunner"]
