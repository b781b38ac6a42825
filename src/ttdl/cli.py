"""Typer CLI entrypoint for ttdl."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from ttdl.config import BACKUP_API_URL, DownloaderConfig
from ttdl.pipeline import DownloadSession
from ttdl.renderer import print_summary, render_outcome

app = typer.Typer(help="Download TikTok videos and photo slides to local files.", no_args_is_help=True)


def _echo_progress(index: int, total: int) -> None:
    typer.echo(f"Downloading image {index}/{total}...")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    """ttdl command group."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def run(
    url: list[str] | None = typer.Option(None, "--url", "-u", help="Process these URLs and exit."),
    video_dir: Path = typer.Option(Path("./tiktok-videos"), file_okay=False),
    image_dir: Path = typer.Option(Path("./tiktok-images"), file_okay=False),
    api_url: str = typer.Option(BACKUP_API_URL),
    timeout: float = typer.Option(30.0, min=1.0, help="Per-request timeout in seconds."),
) -> None:
    """Resolve and download URLs, interactively unless --url is given."""

    try:
        config = DownloaderConfig(
            video_dir=video_dir,
            image_dir=image_dir,
            api_url=api_url,
            timeout_seconds=timeout,
        )
    except ValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    with DownloadSession(config) as session:
        if url:
            for item in url:
                typer.echo(f"Processing {item}")
                typer.echo(render_outcome(session.process(item.strip(), on_progress=_echo_progress)))
        else:
            videos, images = session.output_dirs
            typer.echo(typer.style("TikTok DL", fg=typer.colors.MAGENTA, bold=True))
            typer.echo(f"Videos are saved to {videos}, photo slides to {images}.\n")

            keep_running = True
            while keep_running:
                entered = typer.prompt("Enter a TikTok URL")
                typer.echo("Analyzing URL...")
                typer.echo(render_outcome(session.process(entered.strip(), on_progress=_echo_progress)))
                keep_running = typer.confirm("Download another?", default=False)

        print_summary(session.ledger.summary(), Console())
        typer.echo(
            f"Processed {len(session.ledger)} URL(s): "
            f"{session.ledger.succeeded} succeeded, {session.ledger.failed} failed."
        )

    raise typer.Exit(code=0)
