"""LLM-assisted thread analysis."""

from court_export.agents.registry import (
    get_agent,
    get_agent_config,
    get_all_config,
    reload_config,
)
from court_export.agents.completion import AgentCompletionClient, CompletionClient
from court_export.agents.thread_analyzer import (
    ANALYSIS_SYSTEM_PROMPT,
    ERROR_SUMMARY,
    ThreadAnalyzer,
    build_analysis_prompt,
    parse_analysis_response,
)

__all__ = [
    "get_agent",
    "get_agent_config",
    "get_all_config",
    "reload_config",
    "AgentCompletionClient",
    "CompletionClient",
    "ANALYSIS_SYSTEM_PROMPT",
    "ERROR_SUMMARY",
    "ThreadAnalyzer",
    "build_analysis_prompt",
    "parse_analysis_response",
]
