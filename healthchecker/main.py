"""Entry point for the health checker CLI."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from healthchecker.api.server import build_runner
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.config import settings
from healthchecker.runner import HealthCheckRunner
from healthchecker.sanitizer import default_sanitizer

console = Console()

_STATUS_STYLE = {
    HealthStatus.CRITICAL: "bold red",
    HealthStatus.WARNING: "yellow",
    HealthStatus.GOOD: "green",
}


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting Health Checker API Server", style="bold green"))
    uvicorn.run(
        "healthchecker.api.server:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def _results_table(title: str, results: list[CheckResult]) -> Table:
    # Check text goes in as Text so brackets in paths are not read as markup.
    table = Table(title=Text(title), show_lines=False)
    table.add_column("Status")
    table.add_column("Check")
    table.add_column("Details")
    for r in results:
        table.add_row(
            Text(r.status.value, style=_STATUS_STYLE[r.status]),
            Text(default_sanitizer.plain_text(r.title)),
            Text(default_sanitizer.plain_text(r.description)),
        )
    return table


def run_report(
    runner: HealthCheckRunner,
    as_json: bool = False,
    status: str | None = None,
    category: str | None = None,
) -> int:
    """Run all checks and print the report. Exit code 2 on any critical result."""
    with console.status("[bold green]Running health checks..."):
        runner.run()

    if as_json:
        print(runner.to_json())
        return 2 if runner.critical_count else 0

    for slug, results in runner.get_filtered_results(status, category).items():
        category_meta = runner.categories.get(slug)
        label = category_meta.to_dict()["label"] if category_meta else slug
        console.print(_results_table(label, results))

    console.print(
        f"\n[bold red]{runner.critical_count} critical[/bold red] | "
        f"[yellow]{runner.warning_count} warning[/yellow] | "
        f"[green]{runner.good_count} good[/green] | {runner.total_count} total"
    )
    if runner.is_partial:
        console.print("[dim]Partial run: some checks did not finish.[/dim]")
    return 2 if runner.critical_count else 0


def run_check(runner: HealthCheckRunner, slug: str) -> int:
    result = runner.run_single_check(slug)
    if result is None:
        console.print(f"[red]No health check named '{escape(slug)}'[/red]")
        return 1
    console.print(_results_table(slug, [result]))
    return 2 if result.status is HealthStatus.CRITICAL else 0


def run_stats(runner: HealthCheckRunner, ttl: int) -> int:
    stats = runner.get_stats_with_cache(ttl)
    console.print(
        f"critical={stats['critical']} warning={stats['warning']} "
        f"good={stats['good']} total={stats['total']} lastRun={stats['lastRun']}"
    )
    return 0


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Health Checker")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the API server")

    run_parser = sub.add_parser("run", help="Run every health check")
    run_parser.add_argument("--json", action="store_true", help="Print the JSON report")
    run_parser.add_argument("--status", help="Only show results with this status")
    run_parser.add_argument("--category", help="Only show this category")

    check_parser = sub.add_parser("check", help="Run a single check")
    check_parser.add_argument("slug", help="Check slug, e.g. core.disk_space")

    stats_parser = sub.add_parser("stats", help="Print cached result counts")
    stats_parser.add_argument("--ttl", type=int, default=settings.cache_ttl_seconds)

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
        return
    if args.command not in ("run", "check", "stats"):
        parser.print_help()
        sys.exit(1)

    runner = build_runner(settings)
    if args.command == "run":
        code = run_report(runner, as_json=args.json, status=args.status, category=args.category)
    elif args.command == "check":
        code = run_check(runner, args.slug)
    else:
        code = run_stats(runner, args.ttl)
    sys.exit(code)


if __name__ == "__main__":
    main()
