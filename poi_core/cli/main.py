# poi_core/cli/main.py

import logging
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from poi_core import __version__
from poi_core.config.config_loader import ConfigError, load_config
from poi_core.consensus.authority import AuthorityPolicy
from poi_core.consensus.consensus_errors import ConsensusError
from poi_core.consensus.params import ConsensusParams
from poi_core.consensus.registry import ConsensusRegistry
from poi_core.core.datatypes import ConsensusState
from poi_core.core.serialization import dumps_state

from .epoch_file import load_epoch_file

logger = logging.getLogger(__name__)

console = Console()


def render_state(state: ConsensusState) -> None:
    """Print a finalized epoch as rich tables."""
    console.print(
        Panel.fit(
            f"[bold bright_magenta]Subnet {state.subnet_id} · Epoch {state.epoch}[/]\n"
            f"[bright_green]Submissions:[/] {len(state.submissions)}\n"
            f"[bright_green]Finalized at:[/] {state.finalized_at}",
            title="[bold bright_cyan]⚡ Consensus Finalized ⚡[/]",
            border_style="bright_magenta",
            box=box.ROUNDED,
        )
    )

    miners = Table(title="Miner consensus", border_style="blue")
    miners.add_column("UID", style="magenta")
    miners.add_column("Consensus Weight", style="yellow", justify="right")
    miners.add_column("Trust Score", style="cyan", justify="right")
    for entry in state.miner_consensus:
        miners.add_row(str(entry.uid), str(entry.consensus_weight), str(entry.trust_score))
    console.print(miners)

    validators = Table(title="Validator trust", border_style="blue")
    validators.add_column("#", style="white", justify="right")
    validators.add_column("UID", style="magenta")
    validators.add_column("Trust Score", style="cyan", justify="right")
    for index, entry in enumerate(state.validator_consensus):
        validators.add_row(str(index), str(entry.uid), str(entry.trust_score))
    console.print(validators)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file overriding environment settings.",
)
@click.pass_context
def poicore(ctx, config_path: Optional[str]):
    """⚡ poi-consensus command line: finalize epochs and serve the API."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@poicore.command()
@click.argument("epoch_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the finalized state as JSON.")
@click.pass_context
def finalize(ctx, epoch_file: str, as_json: bool):
    """Submit every weight in EPOCH_FILE, then finalize the epoch."""
    config = ctx.obj["config"]
    try:
        epoch = load_epoch_file(epoch_file)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    registry = ConsensusRegistry(
        stake_provider=epoch.stake_provider(config.stake),
        params=ConsensusParams.from_config(config.consensus),
        authority=AuthorityPolicy(),
    )
    try:
        for submission in epoch.submissions:
            registry.submit_weights(
                epoch.subnet_id,
                epoch.epoch,
                submission.validator_uid,
                [(w.miner_uid, w.weight) for w in submission.weights],
            )
        state = registry.finalize(epoch.subnet_id, epoch.epoch)
    except ConsensusError as e:
        raise click.ClickException(f"{e.code}: {e}") from e

    if as_json:
        click.echo(dumps_state(state, pretty=True).decode("utf-8"))
    else:
        render_state(state)


@poicore.command()
@click.option("--host", default=None, help="Bind address (defaults to configuration).")
@click.option("--port", default=None, type=int, help="Port (defaults to configuration).")
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int]):
    """🚀 Run the consensus HTTP API with uvicorn."""
    import uvicorn

    from poi_core.network.app.main import build_registry, create_app

    config = ctx.obj["config"]
    app = create_app(build_registry(config))
    uvicorn.run(app, host=host or config.api.host, port=port or config.api.port)


@poicore.command()
def version():
    """Show version information."""
    console.print(f"[bold bright_cyan]poi-consensus[/] [bright_yellow]{__version__}[/]")


def main():
    poicore(obj={})


if __name__ == "__main__":
    main()
