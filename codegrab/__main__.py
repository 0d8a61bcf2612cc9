"""CLI entry point: python -m codegrab [--file PATH] [--url URL] [options]

The page HTML is read from ``--file`` or, when that is omitted or ``-``,
from stdin.  ``--url`` names the page the HTML came from; it selects the
matching profile section and feeds the context and skip_domains checks.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from codegrab.config import ScanConfig, load_profile, resolve_config
from codegrab.errors import CodegrabError
from codegrab.export import ExportTarget, export_blocks, format_file_size, write_manifest
from codegrab.filters import SizeBucket, filter_blocks
from codegrab.items import CodeBlock, ScanResult
from codegrab.scanner import ScanProgress, scan, scan_batched

logger = logging.getLogger(__name__)

_OUTPUT_NAMES = {
    ExportTarget.ZIP: "code-blocks.zip",
    ExportTarget.JSON: "code-blocks.json",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codegrab",
        description=(
            "Find source-code snippets in a web page, label their language\n"
            "and save them as files."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--file", default="-", metavar="PATH",
                        help="HTML file to scan; '-' or omitted reads stdin")
    parser.add_argument("--url", default="", metavar="URL",
                        help="URL the HTML came from (profile matching, context)")
    parser.add_argument("--out", default="./out", metavar="DIR",
                        help="Output directory (default: ./out)")
    parser.add_argument("--format", default="files",
                        choices=["files", "zip", "json", "none"],
                        help="Export format (default: files)")
    parser.add_argument("--config", default=None, metavar="YAML",
                        help="YAML profile with default/domains sections")
    parser.add_argument("--max-blocks", type=int, default=None, metavar="N",
                        help="Maximum blocks to keep (default: 50)")
    parser.add_argument("--min-length", type=int, default=None, metavar="N",
                        help="Minimum code length in characters (default: 10)")
    parser.add_argument("--threshold", type=float, default=None, metavar="F",
                        help="Language score threshold for the chosen scan path")
    parser.add_argument("--batched", action="store_true", default=False,
                        help="Process candidates in batches under a time limit")
    parser.add_argument("--grep", default=None, metavar="TEXT",
                        help="Keep blocks whose code, context, filename or language "
                             "contains TEXT (case-insensitive)")
    parser.add_argument("--language", default=None, metavar="TAG",
                        help="Keep only blocks of this language (e.g. python)")
    parser.add_argument("--size", default=None,
                        choices=[b.value for b in SizeBucket],
                        help="Keep only small (<1 KB), medium or large (>10 KB) blocks")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help="Logging level (default: WARNING)")
    return parser


def _build_config(args: argparse.Namespace) -> ScanConfig:
    data: dict[str, Any] = {}
    if args.config:
        data.update(load_profile(args.config, args.url))
    cfg = resolve_config(data)
    threshold_key = "batch_threshold" if args.batched else "language_threshold"
    return cfg.with_overrides(
        max_blocks=args.max_blocks,
        min_code_length=args.min_length,
        **{threshold_key: args.threshold},
    )


def _read_source(args: argparse.Namespace) -> str:
    if args.file == "-":
        return sys.stdin.read()
    try:
        return Path(args.file).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise CodegrabError(f"Could not read {args.file}: {exc}") from exc


def _print_result(
    console: Console, result: ScanResult, blocks: list[CodeBlock], source: str,
) -> None:
    console.print()
    console.print(Rule("[bold cyan]Scan Summary[/bold cyan]"))
    console.print(f"  [bold]Source      :[/bold] [green]{source}[/green]")
    console.print(f"  [bold]Candidates  :[/bold] {result.candidates}")
    console.print(f"  [bold]Code blocks :[/bold] [green]{result.count}[/green]")
    if len(blocks) != result.count:
        console.print(f"  [bold]Matching    :[/bold] [green]{len(blocks)}[/green]")
    if result.skipped:
        skipped = ", ".join(f"{k}={v}" for k, v in sorted(result.skipped.items()))
        console.print(f"  [bold]Skipped     :[/bold] [yellow]{skipped}[/yellow]")
    for warning in result.warnings:
        console.print(f"  [bold red]Warning     :[/bold red] {warning}")
    console.print()

    if not blocks:
        if result.is_empty:
            console.print("  [yellow]No code blocks found on this page.[/yellow]")
        else:
            console.print("  [yellow]No code blocks match the filters.[/yellow]")
        return

    tbl = Table(
        title=f"[bold green]Code Blocks ({len(blocks)})[/bold green]",
        box=box.SIMPLE_HEAVY,
        show_lines=False,
    )
    tbl.add_column("#",        style="dim",    justify="right", width=4,  no_wrap=True)
    tbl.add_column("Filename", style="cyan",   max_width=40,             no_wrap=True)
    tbl.add_column("Language", style="green",  width=12,                 no_wrap=True)
    tbl.add_column("Lines",    justify="right", width=6,                 no_wrap=True)
    tbl.add_column("Size",     justify="right", width=9,                 no_wrap=True)
    tbl.add_column("Context",  style="yellow", max_width=40,             no_wrap=True)
    for i, block in enumerate(blocks, 1):
        tbl.add_row(
            str(i),
            block.filename,
            block.language,
            str(block.lines),
            format_file_size(block.size),
            block.context,
        )
    console.print(tbl)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = Console()

    try:
        cfg = _build_config(args)
        html = _read_source(args)
    except CodegrabError as exc:
        console.print(f"[bold red]ERROR:[/bold red] {exc}")
        return 1

    source = "<stdin>" if args.file == "-" else args.file
    console.print(
        Panel.fit(
            f"[bold cyan]codegrab[/bold cyan]\n"
            f"Source:     [green]{source}[/green]\n"
            f"Page URL:   {args.url or '-'}\n"
            f"Output:     [yellow]{args.out}[/yellow] ({args.format})\n"
            f"Max blocks: {cfg.max_blocks}\n"
            f"Mode:       {'batched' if args.batched else 'single pass'}",
            border_style="cyan",
            title="[bold]Configuration[/bold]",
        ),
    )

    if args.batched:
        def _progress(progress: ScanProgress) -> None:
            logger.info("%s", progress.status)

        result = scan_batched(html, cfg, url=args.url, on_progress=_progress)
    else:
        result = scan(html, cfg, url=args.url)

    blocks = filter_blocks(
        result.blocks, query=args.grep, language=args.language, size=args.size,
    )
    _print_result(console, result, blocks, source)

    if args.format == "none" or not blocks:
        return 0

    out_dir = Path(args.out).resolve()
    target = ExportTarget(args.format)
    try:
        if target is ExportTarget.JSON:
            manifest = result.model_copy(update={"blocks": blocks})
            paths = [write_manifest(manifest, out_dir / _OUTPUT_NAMES[target])]
        elif target is ExportTarget.ZIP:
            paths = export_blocks(blocks, target, out_dir / _OUTPUT_NAMES[target])
        else:
            paths = export_blocks(blocks, target, out_dir)
    except OSError as exc:
        console.print(f"[bold red]ERROR:[/bold red] could not write output: {exc}")
        return 1

    console.print(f"  [bold]Wrote {len(paths)} file(s) under[/bold] [green]{out_dir}[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
