"""Agent registry: loads model settings from YAML, creates and caches Pydantic AI agents."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from court_export.config import AGENTS_CONFIG_PATH
from court_export.utils.logger import get_logger

logger = get_logger("court_export.agents.registry")

_config: dict[str, Any] | None = None
_agent_cache: dict[tuple[str, str], Agent] = {}

# Keys copied from the merged agent config into pydantic-ai ModelSettings
MODEL_SETTING_KEYS = ("temperature", "max_tokens", "timeout")


def _get_config_path() -> Path:
    raw = os.environ.get("AGENTS_CONFIG_PATH", "").strip()
    if raw:
        return Path(raw)
    return AGENTS_CONFIG_PATH


def _load_config() -> dict[str, Any]:
    global _config
    if _config is not None:
        return _config
    path = _get_config_path()
    if not path.exists():
        raise FileNotFoundError(
            f"Agents config not found: {path}. Set AGENTS_CONFIG_PATH or create config/agents.yaml."
        )
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in agents config {path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ValueError(f"Agents config must be a YAML object (dict), got {type(loaded)}")
    _validate_config(loaded)
    _config = loaded
    logger.info(
        "agent_registry.config_loaded",
        path=str(path),
        agent_count=len(_config.get("agents") or {}),
    )
    return _config


def _validate_config(config: dict[str, Any]) -> None:
    """Every agent needs a model (own or inherited) and sane numeric settings."""
    agents = config.get("agents")
    if not isinstance(agents, dict) or not agents:
        raise ValueError("Agents config must define at least one agent under 'agents'")
    defaults = config.get("defaults") or {}
    for agent_id, agent_cfg in agents.items():
        if agent_cfg is not None and not isinstance(agent_cfg, dict):
            raise ValueError(f"Agent {agent_id!r} must be a dict")
        merged = {**defaults, **(agent_cfg or {})}
        model = merged.get("model")
        if not model or not isinstance(model, str):
            raise ValueError(f"Agent {agent_id!r} must have a model string (own or under defaults)")
        max_tokens = merged.get("max_tokens")
        if max_tokens is not None and (not isinstance(max_tokens, int) or max_tokens <= 0):
            raise ValueError(f"Agent {agent_id!r} max_tokens must be a positive integer")


def reload_config() -> dict[str, Any]:
    """Force-reload config from disk and clear agent cache."""
    global _config
    _config = None
    _agent_cache.clear()
    return _load_config()


def get_agent_config(agent_id: str) -> dict[str, Any]:
    """Return merged config (defaults + per-agent overrides) for an agent."""
    config = _load_config()
    defaults = config.get("defaults") or {}
    agents = config.get("agents") or {}
    if agent_id not in agents:
        raise ValueError(f"Unknown agent {agent_id!r}. Known: {list(agents)}")
    return {**defaults, **(agents[agent_id] or {})}


def _model_settings(cfg: dict[str, Any]) -> ModelSettings | None:
    settings = ModelSettings(**{k: cfg[k] for k in MODEL_SETTING_KEYS if cfg.get(k) is not None})
    return settings or None


def get_agent(
    agent_id: str,
    system_prompt: str,
    output_type: type = str,
    model: Model | str | None = None,
) -> Agent:
    """Get or create a Pydantic AI Agent for agent_id + system_prompt.

    Cached by (agent_id, system_prompt); an explicit model override is never cached.
    """
    key = (agent_id, system_prompt)
    if model is None and key in _agent_cache:
        return _agent_cache[key]
    cfg = get_agent_config(agent_id)
    agent = Agent(
        model if model is not None else cfg["model"],
        output_type=output_type,
        system_prompt=system_prompt,
        retries=cfg.get("retries", 1),
        model_settings=_model_settings(cfg),
    )
    if model is None:
        _agent_cache[key] = agent
    logger.debug("agent_registry.agent_created", agent_id=agent_id, model=str(model or cfg["model"]))
    return agent


def get_all_config() -> dict[str, Any]:
    """Return the full parsed config."""
    return dict(_load_config())
