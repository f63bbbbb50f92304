"""strudelshelf preview: download a sample through the SSRF-guarded fetcher."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from strudelshelf.audio.preview import PreviewError, SsrfError, fetch_preview
from strudelshelf.cli.common import console, load_config_or_exit
from strudelshelf.cli.errors import err_preview_failed, err_ssrf_blocked


def preview_cmd(
    url: Annotated[str, typer.Option("--url", help="Sample URL to fetch.")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Where to write the audio.")],
) -> None:
    """Fetch a sample for local playback."""
    cfg = load_config_or_exit()
    try:
        audio = fetch_preview(url, timeout=cfg.github.timeout)
    except SsrfError:
        console.print(err_ssrf_blocked(url))
        raise typer.Exit(1)
    except (PreviewError, ValueError) as exc:
        console.print(err_preview_failed(url, str(exc)))
        raise typer.Exit(1)

    output.write_bytes(audio.body)
    console.print(
        f"[green]✓[/] {escape(str(output))}  "
        f"[dim]{audio.content_type}, {len(audio.body) / 1024:.1f} KB[/]"
    )
