"""strudelshelf snippet: Strudel code for samples saved by search/discover --json.

Usage:
  strudelshelf snippet --input samples.json
  strudelshelf snippet --input samples.json --select kick --select snare
  strudelshelf snippet --input samples.json --pattern "x ~ x ~"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from strudelshelf.cli.common import console, load_config_or_exit
from strudelshelf.cli.errors import err_bad_input_file
from strudelshelf.discovery.models import SampleDescriptor
from strudelshelf.generate.snippet import generate_collection_snippet, generate_snippet


def snippet_cmd(
    input_path: Annotated[
        Path,
        typer.Option("--input", "-i", help="JSON file written by search/discover --json."),
    ],
    select: Annotated[
        list[str] | None,
        typer.Option("--select", "-s", help="Keep only samples with this name (repeatable)."),
    ] = None,
    pattern: Annotated[
        str | None,
        typer.Option("--pattern", "-p", help="Pattern chained onto every sample."),
    ] = None,
    collection: Annotated[
        bool,
        typer.Option("--collection", help="Always emit stack(...), even for one sample."),
    ] = False,
) -> None:
    """Print Strudel code referencing the selected samples."""
    cfg = load_config_or_exit()

    try:
        samples = load_samples(input_path)
    except (OSError, ValueError) as exc:
        console.print(err_bad_input_file(str(input_path), str(exc)))
        raise typer.Exit(1)

    if select:
        wanted = set(select)
        samples = [s for s in samples if s.name in wanted]

    pattern = pattern or cfg.snippet.pattern
    if pattern or collection:
        code = generate_collection_snippet(samples, pattern)
    else:
        code = generate_snippet(samples)

    # Plain echo: generated code must not pass through rich markup.
    typer.echo(code)


def load_samples(path: Path) -> list[SampleDescriptor]:
    """Read descriptors from a JSON list (or an object with a ``samples`` list).

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not a list of sample records.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("samples")
    if not isinstance(data, list):
        raise ValueError("expected a JSON list of samples")
    return [SampleDescriptor.from_dict(item) for item in data if isinstance(item, dict)]
