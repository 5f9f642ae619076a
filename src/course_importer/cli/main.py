"""
CLI Main - Typer command-line interface.
========================================

Commands:
- preview: Parse files and show the previews with their diagnostics
- validate: Check files; exit code 1 when anything is invalid
- paste: Import pasted text from a file or stdin
- commit: Materialize valid previews and submit them
- formats: List supported file formats
- info: Show configuration
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from course_importer.shared.logging import get_console, get_logger, setup_logging_from_settings

logger = get_logger(__name__)

app = typer.Typer(
    name="course-importer",
    help="""📥 Course Importer - Turn course content files into validated courses

Reads spreadsheets, structured text, YAML syllabi, JSON and Markdown,
normalizes every record into a course preview, validates it, and builds
the courses submitted to the course platform.

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

COMMANDS OVERVIEW:

  preview   Show previews and diagnostics for files
  validate  Exit with code 1 when any record is invalid
  paste     Import pasted text (file or '-' for stdin)
  commit    Build courses from valid records and submit them
  formats   List supported file extensions
  info      Show configuration

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

QUICK START:

  course-importer preview syllabus.yaml
  course-importer commit syllabus.yaml --single-course --dry-run -o request.json
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console = get_console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Course content importer."""
    setup_logging_from_settings(level="DEBUG" if verbose else None)


# ─────────────────────────────────────────────────────────────────────────────
# Display Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _print_previews(previews) -> None:
    """Table of previews with their link counts and status."""
    from course_importer.shared.utils import truncate_text

    table = Table(title="Previews")
    table.add_column("#", justify="right")
    table.add_column("Topic")
    table.add_column("Week")
    table.add_column("Videos", justify="right")
    table.add_column("PDFs", justify="right")
    table.add_column("Docs", justify="right")
    table.add_column("Status")

    for i, preview in enumerate(previews, 1):
        status = (
            "[green]valid[/green]"
            if preview.is_valid
            else f"[red]{truncate_text(preview.error, 80)}[/red]"
        )
        table.add_row(
            str(i),
            truncate_text(preview.topic or "(none)", 50),
            preview.week or "",
            str(len(preview.youtube_links)),
            str(len(preview.pdf_links)),
            str(len(preview.doc_links) + len(preview.uploaded_documents)),
            status,
        )

    console.print(table)


def _print_summary(result) -> None:
    summary = result.summary
    color = "green" if summary.invalid_count == 0 else "yellow"
    console.print(Panel(
        f"Total: {summary.total}\n"
        f"Valid: [green]{summary.valid_count}[/green]\n"
        f"Invalid: [red]{summary.invalid_count}[/red]",
        title="📋 Validation Summary",
        border_style=color,
    ))
    if summary.cross_record_duplicates:
        console.print(
            f"[dim]{len(summary.cross_record_duplicates)} video link(s) appear in more than "
            "one record and will be attached once in a single-course import.[/dim]"
        )


def _print_file_errors(batch) -> None:
    for failed in batch.failed:
        console.print(f"[red]✗ {failed.file_name}: {failed.error}[/red]")


def _load_batch(files: list[Path]):
    from course_importer.pipeline import ImportPipeline

    return ImportPipeline().import_files(files)


# ─────────────────────────────────────────────────────────────────────────────
# Preview & Validate Commands
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def preview(
    files: list[Path] = typer.Argument(..., help="Files to import."),
    as_json: bool = typer.Option(
        False,
        "--json", "-j",
        help="Print previews and summary as JSON instead of tables.",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save previews and summary to a JSON file.",
    ),
):
    """
    🔍 Parse files and show the resulting previews.

    Examples:
        course-importer preview syllabus.yaml
        course-importer preview week1.txt week2.md --json
    """
    from course_importer.shared.utils import save_json

    batch = _load_batch(files)
    result = batch.validation
    payload = {
        "previews": [p.to_wire() for p in batch.previews],
        "summary": result.summary.to_wire(),
        "fileErrors": {f.file_name: f.error for f in batch.failed},
    }

    if output_file:
        save_json(output_file, payload)
        console.print(f"[green]✓ Saved to {output_file}[/green]")

    if as_json:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    _print_file_errors(batch)
    if batch.previews:
        _print_previews(batch.previews)
    _print_summary(result)


@app.command()
def validate(
    files: list[Path] = typer.Argument(..., help="Files to validate."),
    show_notes: bool = typer.Option(
        False,
        "--notes", "-n",
        help="Also show non-blocking suggestions.",
    ),
):
    """
    ✅ Validate files; exits with code 1 when any record is invalid.
    """
    from course_importer.preview.validator import diagnose

    batch = _load_batch(files)
    _print_file_errors(batch)

    for i, item in enumerate(batch.previews, 1):
        diagnostics = diagnose(item)
        mark = "[green]✓[/green]" if diagnostics.is_valid else "[red]✗[/red]"
        console.print(f"{mark} {i}. {item.topic or '(no topic)'}")
        for error in diagnostics.errors:
            console.print(f"    [red]{error}[/red]")
        if show_notes:
            for note in diagnostics.notifications:
                console.print(f"    [dim]{note}[/dim]")

    result = batch.validation
    _print_summary(result)
    if batch.failed or result.summary.invalid_count:
        raise typer.Exit(1)


@app.command()
def paste(
    source: str = typer.Argument(..., help="Text file to read, or '-' for stdin."),
    auto_detect: bool = typer.Option(
        True,
        "--auto-detect/--no-auto-detect",
        help="Detect topics and spread found links over records without links.",
    ),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print previews as JSON."),
):
    """
    📋 Import pasted text (format detected from the content).

    Examples:
        pbcopy | course-importer paste -
        course-importer paste notes.txt --no-auto-detect
    """
    from course_importer.pipeline import ImportPipeline
    from course_importer.preview.summary import summarize

    if source == "-":
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.exists():
            console.print(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
        text = path.read_text(encoding="utf-8")

    previews = ImportPipeline().import_text(text, auto_detect=auto_detect)
    result = summarize(previews)

    if as_json:
        typer.echo(json.dumps(
            {"previews": [p.to_wire() for p in previews], "summary": result.summary.to_wire()},
            indent=2,
            ensure_ascii=False,
        ))
        return

    if previews:
        _print_previews(previews)
    _print_summary(result)


# ─────────────────────────────────────────────────────────────────────────────
# Commit Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def commit(
    files: list[Path] = typer.Argument(..., help="Files to import."),
    single_course: bool = typer.Option(
        True,
        "--single-course/--multi-course",
        help="One course with a module per record, or one course per record.",
    ),
    title: Optional[str] = typer.Option(
        None,
        "--title", "-t",
        help="Course title (single-course). Default: the shared syllabus course name.",
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category", "-c",
        help="Course category. Default: inferred from names.",
    ),
    visibility: Optional[str] = typer.Option(
        None,
        "--visibility",
        help="Course visibility (private, shared, public).",
    ),
    enhance: bool = typer.Option(
        False,
        "--enhance",
        help="Ask the enhancement service to fill missing optional fields first.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Build the request without submitting it.",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save the commit request to a JSON file.",
    ),
):
    """
    🚀 Build courses from the valid records and submit them in one request.

    Invalid records are skipped. Nothing is created unless the whole
    submission succeeds.

    Examples:
        course-importer commit dsa.yaml --single-course
        course-importer commit topics.csv --multi-course --dry-run -o out.json
    """
    from course_importer.materialize.materializer import MaterializeOptions
    from course_importer.preview.session import ImportSession
    from course_importer.shared.exceptions import CourseImportError
    from course_importer.shared.schemas import CommitMode
    from course_importer.shared.utils import save_json

    batch = _load_batch(files)
    _print_file_errors(batch)

    session = ImportSession(batch.previews)
    if enhance:
        enhanced = sum(session.apply_enhancement(i) for i in range(len(session.previews)))
        console.print(f"[dim]Enhanced {enhanced} record(s)[/dim]")

    _print_summary(session.result)

    mode = CommitMode.SINGLE_COURSE if single_course else CommitMode.MULTI_COURSE
    options = MaterializeOptions(title=title, category=category, visibility=visibility)

    try:
        outcome = session.commit(mode, options, dry_run=dry_run)
    except CourseImportError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    request = outcome.request
    if output_file:
        save_json(output_file, request.to_wire())
        console.print(f"[green]✓ Saved request to {output_file}[/green]")

    table = Table(title="Courses")
    table.add_column("Title")
    table.add_column("Category")
    table.add_column("Modules", justify="right")
    table.add_column("Videos", justify="right")
    for course in request.courses:
        table.add_row(
            course.title,
            course.category,
            str(len(course.modules)),
            str(len(course.video_embed_urls())),
        )
    console.print(table)

    if outcome.dry_run:
        console.print("[yellow]Dry run: nothing was submitted[/yellow]")
    else:
        console.print(
            f"\n[bold green]✓ Created {outcome.response.created_count} course(s)[/bold green]"
        )


# ─────────────────────────────────────────────────────────────────────────────
# Formats & Info Commands
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def formats():
    """📄 List supported file extensions and their parsers."""
    from course_importer.ingestion.dispatcher import EXTENSION_MAP

    table = Table(title="Supported Formats")
    table.add_column("Extension")
    table.add_column("Parser")
    for extension in sorted(EXTENSION_MAP):
        table.add_row(extension, EXTENSION_MAP[extension])
    console.print(table)


@app.command()
def info():
    """
    ℹ️ Show configuration.

    Displays the version, service endpoints and validation limits.
    """
    from course_importer import __version__
    from course_importer.shared.config import get_settings

    settings = get_settings()

    console.print(Panel(
        f"[bold]Course Importer[/bold]\n"
        f"Version: {__version__}\n"
        f"Config: config/settings.yaml",
        title="ℹ️ Info",
    ))

    table = Table(title="Services")
    table.add_column("Service")
    table.add_column("URL")
    table.add_row("Commit", settings.get_effective_commit_url())
    table.add_row("Enhance", settings.get_effective_enhance_url())
    table.add_row("Upload", settings.get_effective_upload_url())
    console.print(table)

    token = "set" if settings.course_api_token else "not set"
    console.print(f"\nAPI token: {token}")
    console.print(f"Batch workers: {settings.get_effective_max_workers()}")
    console.print(f"Minimum topic length: {settings.validation.min_topic_length}")
    console.print(f"Max upload size: {settings.uploads.max_file_size_mb} MB")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
