"""Prometheus metric definitions for the discovery pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# --- Discovery runs ---

discovery_runs_total = Counter(
    "beamwatch_discovery_runs_total",
    "Total discovery runs by terminal status",
    labelnames=["status"],
)

discovery_duration_seconds = Histogram(
    "beamwatch_discovery_duration_seconds",
    "Wall time of one discovery run",
    buckets=(1, 2, 5, 10, 20, 30, 60, 120, 300),
)

# --- External providers ---

agent_searches_total = Counter(
    "beamwatch_agent_searches_total",
    "Research agent searches by outcome",
    labelnames=["agent_id", "outcome"],
)

reasoning_parse_failures_total = Counter(
    "beamwatch_reasoning_parse_failures_total",
    "Reasoning responses that could not be parsed",
    labelnames=["stage"],
)

llm_tokens_total = Counter(
    "beamwatch_llm_tokens_total",
    "Total LLM tokens consumed",
    labelnames=["model", "token_type"],
)

# --- Automation ---

batch_items_total = Counter(
    "beamwatch_batch_items_total",
    "Scheduled batch items processed",
    labelnames=["job", "outcome"],
)
