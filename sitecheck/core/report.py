"""Report output: HTML/JSON files per check and a Rich console summary."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sitecheck.core.cache import ensure_dir, write_json_file
from sitecheck.models.types import CheckResult, FooterLinkCheck, MobileCheck, RunResult, UrlPageCheck


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
RESULT_STYLES = {"PASS": "green", "FAIL": "red bold"}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _count_passed(rows) -> int:
    return sum(1 for row in rows if row.result == CheckResult.PASS)


def _render(template_name: str, html_path: str | Path, **context) -> Path:
    path = Path(html_path)
    ensure_dir(path.parent)
    html = _env.get_template(template_name).render(generated_at=datetime.now().isoformat(timespec="seconds"), **context)
    path.write_text(html, encoding="utf-8")
    return path


def write_url_verification_report(
    html_path: str | Path,
    json_path: str | Path,
    pages_checked: list[UrlPageCheck],
    footer_links_checked: list[FooterLinkCheck],
    title: str = "URL Verification Report",
):
    write_json_file(json_path, {
        "pagesChecked": [p.to_dict() for p in pages_checked],
        "footerLinksChecked": [f.to_dict() for f in footer_links_checked],
    })
    _render(
        "url_report.html",
        html_path,
        title=title,
        heading="URL verification",
        pages=pages_checked,
        footer_links=footer_links_checked,
        page_pass=_count_passed(pages_checked),
        footer_pass=_count_passed(footer_links_checked),
    )


def write_mobile_responsive_report(
    html_path: str | Path,
    json_path: str | Path,
    mobile_checks: list[MobileCheck],
    title: str = "Mobile Responsive Report",
):
    write_json_file(json_path, {"mobileChecks": [m.to_dict() for m in mobile_checks]})
    _render(
        "mobile_report.html",
        html_path,
        title=title,
        heading="Mobile responsive",
        checks=mobile_checks,
        passed=_count_passed(mobile_checks),
    )


def print_report(result: RunResult, console: Console | None = None):
    """Print a run summary using Rich."""
    console = console or Console()

    duration = ""
    if result.started_at and result.completed_at:
        secs = (result.completed_at - result.started_at).total_seconds()
        duration = f" in {secs:.1f}s"

    header = Text()
    header.append("\n Site Check Report\n", style="bold")
    header.append(f" {result.url}\n", style="dim")
    header.append(f" checks: {', '.join(result.checks) or 'none'}{duration}\n", style="dim")
    console.print(Panel(header, border_style="blue"))

    if result.discovery:
        d = result.discovery
        console.print(f"  Discovered [bold]{len(d.nav_urls)}[/bold] navigation URLs")
        sections = Table(show_header=True, header_style="bold", padding=(0, 1))
        sections.add_column("Section", min_width=12)
        sections.add_column("URLs", justify="right")
        for name, urls in d.section_urls.items():
            sections.add_row(name, str(len(urls)))
        sections.add_row("Direct", str(len(d.direct_urls)))
        console.print(sections)
        console.print()

    _print_rows(console, "Pages", result.pages_checked, lambda r: r.url)
    _print_rows(console, "Footer links", result.footer_links_checked, lambda r: f"{r.link_text[:25]} -> {r.href}")
    _print_rows(console, "Mobile", result.mobile_checks, lambda r: r.url)

    if result.visual_snapshots:
        captured = sum(1 for s in result.visual_snapshots if s.screenshot_path)
        console.print(f"  Visual snapshots: {captured}/{len(result.visual_snapshots)} captured\n")

    if result.errors:
        console.print(f"  [red]Errors: {len(result.errors)}[/red]")
        for err in result.errors[:5]:
            console.print(f"    [dim]• {err[:120]}[/dim]")
        console.print()

    if result.failures == 0:
        console.print("  [green bold]All checks passed.[/green bold]\n")
    else:
        console.print(f"  [red bold]{result.failures} failing check(s).[/red bold]\n")


def _print_rows(console: Console, title: str, rows: list, label_fn):
    if not rows:
        return
    passed = _count_passed(rows)
    console.print(f"  {title}: [green]{passed} PASS[/green], [red]{len(rows) - passed} FAIL[/red]")

    failing = [row for row in rows if row.result == CheckResult.FAIL]
    if not failing:
        console.print()
        return

    table = Table(show_header=True, header_style="bold", padding=(0, 1))
    table.add_column("Result", width=6, justify="center")
    table.add_column("Target", max_width=60)
    table.add_column("Reason", min_width=30)
    for row in failing[:20]:
        table.add_row(
            Text(row.result.value, style=RESULT_STYLES[row.result.value]),
            label_fn(row),
            row.reason[:120],
        )
    console.print(table)
    console.print()
