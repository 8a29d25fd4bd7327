"""
guildjournal/cli.py

Command line interface over a journal snapshot.

Usage:
    guildjournal status
    guildjournal pending --kind proposal
    guildjournal resolve verification req-1a2b3c approved --feedback "Well done"
    guildjournal eligibility Wayfarer
    guildjournal draft "Beekeeping" "Keep a healthy hive for a season"
"""

import asyncio
import json
import logging

import click

from .config import GuildConfig, storage_dir_option
from .integration.content_client import ContentServiceClient
from .integration.drafting import BadgeDrafter
from .protocol.council import CouncilStatus, RequestKind
from .protocol.events import ResolveRequest
from .protocol.storage import FileBackend, SnapshotStore
from .protocol.tiers import Tier, assess_eligibility
from .store import GuildStore

logger = logging.getLogger("guildjournal.cli")


def _parse_kind(ctx, param, value):
    if value is None:
        return None
    try:
        return RequestKind.from_string(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _parse_tier(ctx, param, value):
    try:
        return Tier.from_string(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.group()
@storage_dir_option()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: GUILD_LOG_LEVEL or INFO)",
)
@click.pass_context
def cli(ctx, storage_dir, log_level):
    """Guild journal: badges, council requests and tier ascension."""
    config = GuildConfig.from_env()
    if storage_dir is not None:
        config.storage_dir = storage_dir
    if log_level:
        config.log_level = log_level.upper()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _open_store(ctx) -> GuildStore:
    config = ctx.obj["config"]
    store = GuildStore(
        snapshot_store=SnapshotStore(FileBackend(config.storage_dir)),
        config=config,
    )
    is_new = not store.snapshots.exists()
    store.load()
    if is_new:
        # keep the generated member id stable across runs
        store.save()
    return store


@cli.command()
@click.pass_context
def status(ctx):
    """Show the member, tier and request counts."""
    store = _open_store(ctx)
    stats = store.get_stats()
    click.echo(f"{stats['user_name']} ({stats['user_id']})")
    click.echo(f"Tier: {stats['tier']}")
    click.echo(
        f"Badges: {stats['badges_owned']} owned, "
        f"{stats['badges_mastered']} mastered, {stats['badges_in_progress']} in progress, "
        f"{stats['badges_verified']} verified"
    )
    click.echo(f"Pending council requests: {stats['pending_requests']}")
    for kind, counts in stats["requests"].items():
        total = sum(counts.values())
        if total:
            click.echo(f"  {kind}: {counts['pending']} pending / {total} total")


@cli.command()
@click.option("--kind", default=None, callback=_parse_kind, help="Only one request kind")
@click.pass_context
def pending(ctx, kind):
    """List pending council requests."""
    store = _open_store(ctx)
    requests = store.pending_requests(kind)
    if not requests:
        click.echo("No pending requests.")
        return
    for request in requests:
        click.echo(f"{request.kind.value}\t{request.id}\t{request.user_name}\t{request.submitted_at}")


@cli.command()
@click.argument("kind", callback=_parse_kind)
@click.argument("request_id")
@click.argument(
    "status",
    type=click.Choice([s.value for s in CouncilStatus if s != CouncilStatus.PENDING]),
)
@click.option("--feedback", default=None, help="Reviewer feedback or rejection reason")
@click.option("--partner-name", default=None, help="Stamp an approved proposal as a partner badge")
@click.pass_context
def resolve(ctx, kind, request_id, status, feedback, partner_name):
    """Resolve a pending council request."""
    store = _open_store(ctx)
    event = ResolveRequest(
        kind=kind,
        request_id=request_id,
        status=CouncilStatus(status),
        feedback=feedback,
        as_partner_badge=partner_name is not None,
        partner_name=partner_name,
    )
    if not store.dispatch(event):
        raise click.ClickException(str(store.last_error))
    click.echo(f"{kind.value} request {request_id} -> {status}")


@cli.command()
@click.argument("tier", callback=_parse_tier)
@click.pass_context
def eligibility(ctx, tier):
    """Advisory prerequisite report for TIER."""
    store = _open_store(ctx)
    report = assess_eligibility(store.state.user, tier)
    click.echo(json.dumps(report.to_dict(), indent=2))


@cli.command()
@click.argument("topic")
@click.argument("goal")
@click.pass_context
def draft(ctx, topic, goal):
    """Draft a badge curriculum (nothing is saved)."""
    config = ctx.obj["config"]
    drafter = BadgeDrafter(ContentServiceClient(config))
    result = asyncio.run(drafter.draft_badge(topic, goal))
    if result.is_placeholder:
        click.echo("The Oracle could not draft this badge; starting from a blank draft.", err=True)
    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
