"""
autoswe: plan-then-execute software engineering agent.

Command: autoswe run -r "add a health endpoint"
"""

import sys

import click
from rich.console import Console

from . import __version__
from .config import Config, ModelPreset
from .errors import PlanningError, WorkspaceError
from .logger import setup_logging
from .orchestrator import Orchestrator
from .rendering import RunRenderer

console = Console()
BANNER = (
    f"[bold #7FA6D9]autoswe[/bold #7FA6D9] "
    f"[dim]v{__version__} · autonomous task agent[/dim]"
)


def _apply_model_override(config: Config, model: str, api_key, api_base):
    """Point both phases at ``model``: a preset name or a raw litellm model id."""
    if model not in config.models:
        provider = "local" if api_base else (model.split("/", 1)[0] if "/" in model else "openai")
        config.models["_cli"] = ModelPreset(
            name="_cli",
            provider=provider,
            model=model,
            api_base=api_base,
            api_key=api_key,
        )
        model = "_cli"
    config.active_model = model
    config.planner_model = None
    config.executor_model = None


@click.group()
@click.version_option(__version__, prog_name="autoswe")
def cli():
    """autoswe: explore a codebase, plan the change, then carry it out."""


@cli.command()
@click.option("--request", "-r", required=True, help="What the agent should accomplish")
@click.option("--project-dir", "-d", default=".", help="Working directory")
@click.option("--model", "-m", default=None, help="Model preset name or litellm model id")
@click.option("--api-key", "-k", default=None, help="API key override")
@click.option("--api-base", "-b", default=None, help="API base override")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def run(request, project_dir, model, api_key, api_base, verbose):
    """Plan and execute REQUEST against the working directory."""
    console.print(BANNER)
    config = Config.load(project_dir)

    if model:
        _apply_model_override(config, model, api_key, api_base)
    if verbose:
        config.verbose = True
    setup_logging(verbose=config.verbose, log_file=config.log_file)

    for preset in {id(p): p for p in (config.get_planner_preset(),
                                      config.get_executor_preset())}.values():
        if api_key:
            preset.api_key = api_key
        if api_base:
            preset.api_base = api_base

    missing = config.missing_credentials()
    if missing:
        console.print(
            f"[red]Error: no API key for model preset(s): {', '.join(missing)}.[/red]\n"
            "[dim]Set the provider's key in the environment or a .env file, or pass --api-key.[/dim]"
        )
        sys.exit(1)

    orchestrator = Orchestrator.from_config(config, request, config.project_root, console)
    try:
        orchestrator.run()
    except WorkspaceError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except PlanningError:
        # Already rendered by the orchestrator.
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]  Interrupted.[/yellow]")
        sys.exit(130)


@cli.command("config")
@click.option("--project-dir", "-d", default=".", help="Working directory")
def config_cmd(project_dir):
    """Show configuration."""
    cfg = Config.load(project_dir)
    RunRenderer(console).render_config(cfg.summary())


if __name__ == "__main__":
    cli()
