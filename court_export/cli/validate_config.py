"""Validate agents config: load YAML, build each agent's settings, print summary table."""

from rich.table import Table

from court_export.agents.registry import get_agent_config, get_all_config

from .shared import console, logger


def validate_config() -> None:
    """Load config/agents.yaml, check it, and print the merged settings per agent."""
    log = logger.bind(command="validate-config")
    log.info("validate_config.start")

    try:
        config = get_all_config()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Config error: {e}[/red]")
        log.error("validate_config.fail", error=str(e))
        raise SystemExit(1) from e

    agents = config.get("agents") or {}
    table = Table(title="Agents config")
    table.add_column("Agent ID", style="cyan")
    table.add_column("Model", style="green")
    table.add_column("Retries", justify="right")
    table.add_column("Temperature", justify="right")
    table.add_column("Max tokens", justify="right")

    for agent_id in sorted(agents):
        merged = get_agent_config(agent_id)
        table.add_row(
            agent_id,
            str(merged.get("model")),
            str(merged.get("retries", 1)),
            str(merged.get("temperature", "(default)")),
            str(merged.get("max_tokens", "(default)")),
        )

    console.print(table)
    console.print(f"[green]Config valid. {len(agents)} agents.[/green]")
    log.info("validate_config.ok", agents=len(agents))
