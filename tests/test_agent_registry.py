"""Tests for agent registry: config loading, merging, caching, fail-fast."""

import os
import sys
import tempfile
from pathlib import Path
from unittest import TestCase, main

# Allow importing court_export when running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


class TestAgentRegistry(TestCase):
    """Tests for agent registry config loading, merging, caching, fail-fast."""

    def setUp(self):
        os.environ.setdefault("OPENAI_API_KEY", "test-key")
        import court_export.agents.registry as reg

        reg.reload_config()

    def _with_config(self, text):
        """Point the registry at a temporary YAML file; returns a restore callable."""
        import court_export.agents.registry as reg

        tmp = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        tmp.write(text)
        tmp.close()
        orig = os.environ.get("AGENTS_CONFIG_PATH")
        os.environ["AGENTS_CONFIG_PATH"] = tmp.name
        reg._config = None
        reg._agent_cache.clear()

        def restore():
            if orig is not None:
                os.environ["AGENTS_CONFIG_PATH"] = orig
            else:
                os.environ.pop("AGENTS_CONFIG_PATH", None)
            reg._config = None
            reg._agent_cache.clear()
            os.unlink(tmp.name)

        return restore

    def test_fail_fast_missing_config(self):
        """When agents config file is missing, registry raises FileNotFoundError."""
        import court_export.agents.registry as reg

        reg._config = None
        orig = os.environ.get("AGENTS_CONFIG_PATH")
        try:
            os.environ["AGENTS_CONFIG_PATH"] = str(Path("/nonexistent/agents.yaml"))
            with self.assertRaises(FileNotFoundError) as ctx:
                reg._load_config()
            self.assertIn("not found", str(ctx.exception).lower())
        finally:
            if orig is not None:
                os.environ["AGENTS_CONFIG_PATH"] = orig
            else:
                os.environ.pop("AGENTS_CONFIG_PATH", None)
            reg._config = None

    def test_load_config_returns_structure(self):
        """get_all_config returns dict with defaults and the thread_analyzer agent."""
        from court_export.agents.registry import get_all_config

        config = get_all_config()
        self.assertIsInstance(config, dict)
        self.assertIn("defaults", config)
        self.assertIn("agents", config)
        self.assertIn("thread_analyzer", config["agents"])

    def test_get_agent_config_merges_defaults(self):
        """get_agent_config merges defaults with per-agent overrides."""
        from court_export.agents.registry import get_agent_config

        cfg = get_agent_config("thread_analyzer")
        self.assertEqual(cfg["model"], "openai:gpt-4o-mini")
        self.assertIn("retries", cfg)
        self.assertEqual(cfg["max_tokens"], 1000)

    def test_agent_override_wins(self):
        import court_export.agents.registry as reg

        restore = self._with_config(
            "defaults:\n  model: openai:gpt-4o-mini\n  temperature: 0.3\n"
            "agents:\n  thread_analyzer:\n    temperature: 0.0\n"
        )
        try:
            cfg = reg.get_agent_config("thread_analyzer")
            self.assertEqual(cfg["temperature"], 0.0)
            self.assertEqual(cfg["model"], "openai:gpt-4o-mini")
        finally:
            restore()

    def test_unknown_agent_raises(self):
        from court_export.agents.registry import get_agent_config

        with self.assertRaises(ValueError) as ctx:
            get_agent_config("nope")
        self.assertIn("Unknown agent", str(ctx.exception))

    def test_invalid_config_rejected(self):
        import court_export.agents.registry as reg

        for text in (
            "defaults: {}\nagents: {}\n",
            "agents:\n  thread_analyzer: {}\n",
            "defaults:\n  model: openai:gpt-4o-mini\nagents:\n  thread_analyzer:\n    max_tokens: -1\n",
            "- just\n- a list\n",
        ):
            restore = self._with_config(text)
            try:
                with self.assertRaises(ValueError):
                    reg.get_all_config()
            finally:
                restore()

    def test_get_agent_caches(self):
        """get_agent returns same cached agent for same agent_id and system prompt."""
        from court_export.agents.registry import get_agent

        agent1 = get_agent("thread_analyzer", "You analyze email.")
        agent2 = get_agent("thread_analyzer", "You analyze email.")
        self.assertIs(agent1, agent2)
        self.assertIsNot(agent1, get_agent("thread_analyzer", "Different prompt."))

    def test_model_override_not_cached(self):
        from pydantic_ai.models.test import TestModel

        from court_export.agents.registry import get_agent

        agent1 = get_agent("thread_analyzer", "p", model=TestModel())
        agent2 = get_agent("thread_analyzer", "p", model=TestModel())
        self.assertIsNot(agent1, agent2)

    def test_reload_config_clears_cache(self):
        """reload_config clears in-memory config and agent cache."""
        from court_export.agents.registry import get_agent, get_agent_config, reload_config

        agent_before = get_agent("thread_analyzer", "p")
        config_before = get_agent_config("thread_analyzer")
        reload_config()
        config_after = get_agent_config("thread_analyzer")
        self.assertEqual(config_before["model"], config_after["model"])
        self.assertIsNot(agent_before, get_agent("thread_analyzer", "p"))


if __name__ == "__main__":
    main()
