#!/usr/bin/env python
"""
Command line entry point for Transcripts Machine.

Runs the extraction pipeline without the web UI, or serves the API.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from transcripts_machine.components.url_validator.validator import (
    format_transcript,
    transcript_filename,
)
from transcripts_machine.core.errors import TranscriptsMachineError
from transcripts_machine.run import run_transcripts_machine

app = typer.Typer(
    help="Transcripts Machine - Extract YouTube transcripts with a remote browser",
    no_args_is_help=True,
)


def _print_progress(step: str, message: str, progress: int, data: dict) -> None:
    typer.echo(f"[{progress:3d}%] {message}")
    if step == "session_started" and data.get("debug_view_url"):
        typer.echo(f"       Live view: {data['debug_view_url']}")


@app.command(name="extract", help="Extract the transcript of a YouTube video")
def extract_command(
    video_url: Annotated[str, typer.Argument(help="YouTube video URL")],
    summary: Annotated[
        bool, typer.Option(help="Also generate an AI summary of the transcript")
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option(
            help="Write the transcript to this file (a directory gets the default name)"
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option(help="Show debug logs")] = False,
):
    """Extract a transcript and print it, optionally saving it as a text file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )

    try:
        run_output = asyncio.run(
            run_transcripts_machine(
                video_url,
                with_summary=summary,
                progress_callback=_print_progress,
            )
        )
    except TranscriptsMachineError as exc:
        typer.secho(f"Failed to extract transcript: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    result = run_output.result
    text = format_transcript(result.transcript)
    typer.echo()
    typer.echo(text)

    if output is not None:
        path = output / transcript_filename(result.video_id) if output.is_dir() else output
        path.write_text(text + "\n", encoding="utf-8")
        typer.secho(f"Transcript downloaded as {path}", fg=typer.colors.GREEN)

    if summary:
        typer.echo()
        if run_output.summary:
            typer.secho("AI Summary", bold=True)
            typer.echo(run_output.summary)
        else:
            typer.secho(
                f"Failed to generate summary: {run_output.summary_error}",
                fg=typer.colors.YELLOW,
                err=True,
            )


@app.command(name="serve", help="Run the HTTP API")
def serve_command(
    host: Annotated[Optional[str], typer.Option(help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option(help="Bind port")] = None,
):
    import uvicorn

    from transcripts_machine_api.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "transcripts_machine_api.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level,
        reload=settings.debug,
    )


def main():
    load_dotenv()
    app()


if __name__ == "__main__":
    main()
