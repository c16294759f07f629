"""bucketctl CLI - Typer-based entry point.

Supports:
  - bucketctl observe buckets.yaml             # Report facet drift
  - bucketctl reconcile buckets.yaml           # Converge every facet
  - bucketctl reconcile buckets.yaml --dry-run # Show what would change
  - bucketctl config                           # Show effective settings
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bucketctl import __version__
from bucketctl.core.logging_config import setup_logging
from bucketctl.core.settings import settings
from bucketctl.manifest import dump_manifest, load_manifest
from bucketctl.sync.errors import BucketCtlError
from bucketctl.sync.models import Bucket, BucketReconcileReport, ReconcileAction
from bucketctl.sync.reconciler import BucketReconciler
from bucketctl.tools.s3_client import S3BucketClient

console = Console()
app = typer.Typer(
    name="bucketctl",
    help=f"bucketctl v{__version__} - Reconcile S3 bucket logging and encryption",
    add_completion=False,
    no_args_is_help=True,
)

STATUS_STYLES = {
    "updated": "green",
    "needs_update": "yellow",
    "needs_deletion": "magenta",
}


def _setup_logging(verbose: bool) -> None:
    setup_logging(
        verbose=verbose or settings.log_level == "DEBUG",
        log_file=settings.log_file_path if settings.log_file_enabled else None,
        max_bytes=settings.log_file_max_size_mb * 1024 * 1024,
        backup_count=settings.log_file_backup_count,
    )


def _render_report(report: BucketReconcileReport) -> None:
    table = Table(
        title=f"{report.bucket} ({report.external_name})",
        border_style="cyan",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Facet", style="cyan")
    table.add_column("Status")
    table.add_column("Action")
    table.add_column("Late init")
    table.add_column("Error", style="red")

    for result in report.results:
        status = result.status.value if result.status else "-"
        style = STATUS_STYLES.get(status, "white")
        action = result.action.value if result.action != ReconcileAction.NONE else ""
        table.add_row(
            result.facet,
            f"[{style}]{status}[/{style}]",
            action,
            "yes" if result.late_initialized else "",
            result.error or "",
        )
    console.print(table)


async def _run_pass(
    reconciler: BucketReconciler, buckets: list[Bucket], observe_only: bool
) -> list[BucketReconcileReport]:
    reports = []
    for bucket in buckets:
        if observe_only:
            reports.append(await reconciler.observe(bucket))
        else:
            reports.append(await reconciler.reconcile(bucket))
    return reports


def _execute(
    manifest: Path,
    observe_only: bool,
    dry_run: bool,
    concurrent: bool | None,
    write_back: bool,
) -> None:
    try:
        buckets = load_manifest(manifest)
        if not buckets:
            console.print(f"[yellow]No Bucket documents in {manifest}[/yellow]")
            return

        reconciler = BucketReconciler(
            api=S3BucketClient(), dry_run=dry_run, concurrent=concurrent
        )
        reports = asyncio.run(_run_pass(reconciler, buckets, observe_only))

        for report in reports:
            _render_report(report)

        if write_back and any(r.late_initialized for r in reports):
            dump_manifest(buckets, manifest)
            console.print(f"[green]Wrote late-initialized state to {manifest}[/green]")

    except (BucketCtlError, OSError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(1) from None

    failed = [r for report in reports for r in report.failed]
    if failed:
        console.print(f"[bold red]{len(failed)} facet operation(s) failed[/bold red]")
        raise typer.Exit(1)


@app.command()
def observe(
    manifest: Path = typer.Argument(..., help="Bucket manifest (YAML)"),
    write_back: bool = typer.Option(
        False, "--write-back", "-w", help="Persist late-initialized fields to the manifest"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Observe every facet of every bucket without remote writes."""
    _setup_logging(verbose)
    _execute(manifest, observe_only=True, dry_run=False, concurrent=None, write_back=write_back)


@app.command()
def reconcile(
    manifest: Path = typer.Argument(..., help="Bucket manifest (YAML)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Report actions without applying"),
    concurrent: Optional[bool] = typer.Option(
        None, "--concurrent/--sequential", help="Run facets of a bucket concurrently"
    ),
    write_back: bool = typer.Option(
        False, "--write-back", "-w", help="Persist late-initialized fields to the manifest"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Run one reconciliation pass for every bucket in the manifest."""
    _setup_logging(verbose)
    _execute(
        manifest,
        observe_only=False,
        dry_run=dry_run,
        concurrent=concurrent,
        write_back=write_back,
    )


@app.command()
def config() -> None:
    """Display current bucketctl configuration."""
    table = Table(title=f"bucketctl v{__version__} Configuration", border_style="cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    def mask(value: str) -> str:
        return "****" if value else "(not set)"

    config_items = [
        ("AWS Region", settings.aws_region),
        ("Endpoint URL", settings.aws_endpoint_url or "(default)"),
        ("Access Key ID", mask(settings.aws_access_key_id)),
        ("Secret Access Key", mask(settings.aws_secret_access_key)),
        ("Connect Timeout", f"{settings.s3_connect_timeout}s"),
        ("Read Timeout", f"{settings.s3_read_timeout}s"),
        ("Max Attempts", str(settings.s3_max_attempts)),
        ("Concurrent Facets", str(settings.reconcile_concurrent)),
        ("Log Level", settings.log_level),
        ("Log File", settings.log_file_path if settings.log_file_enabled else "(disabled)"),
    ]
    for key, value in config_items:
        table.add_row(key, value)

    console.print(Panel.fit(table, border_style="cyan"))


def main() -> None:
    app()
