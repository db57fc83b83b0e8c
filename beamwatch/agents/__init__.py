"""Discovery agents: research (search), supervisor (validation) and threat scoring."""

from beamwatch.agents.research import (
    MAX_CANDIDATES_PER_AGENT,
    QUERY_TEMPLATES,
    ResearchAgent,
    build_research_agents,
    run_research_agents,
)
from beamwatch.agents.supervisor import (
    CONFIDENCE_THRESHOLD,
    MAX_VALIDATED,
    SupervisorValidator,
    select_validated,
)
from beamwatch.agents.threat import ThreatScorer

__all__ = [
    "CONFIDENCE_THRESHOLD",
    "MAX_CANDIDATES_PER_AGENT",
    "MAX_VALIDATED",
    "QUERY_TEMPLATES",
    "ResearchAgent",
    "SupervisorValidator",
    "ThreatScorer",
    "build_research_agents",
    "run_research_agents",
    "select_validated",
]
