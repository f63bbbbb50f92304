"""strudelshelf rich error messages: actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from strudelshelf.cli.errors import err_no_db
    console.print(err_no_db(".strudelshelf.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape


def err_no_db(db_path: str = ".strudelshelf.db") -> str:
    """No catalog database at *db_path*."""
    return (
        f"[red]Error:[/] No catalog database found at '{escape(db_path)}'.\n"
        "  Run:  strudelshelf init"
    )


def err_config(message: str) -> str:
    """Config file rejected by the loader."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {escape(message)}\n"
        "  Fix strudelshelf.yaml or ~/.strudelshelf/config.yaml and retry."
    )


def err_code_search_failed(message: str, has_token: bool) -> str:
    """GitHub code search itself failed; no remote results are possible."""
    hint = (
        "  Check your network connection and GitHub status, then retry."
        if has_token
        else "  Anonymous code search is heavily rate limited. Set:  export GITHUB_TOKEN=ghp_..."
    )
    return (
        f"[red]Error:[/] GitHub code search failed: {escape(message)}\n"
        f"{hint}\n"
        "  Or search local samples only:  strudelshelf search --source upload"
    )


def err_catalog_data(message: str) -> str:
    """Stored catalog record holds unparseable JSON."""
    return (
        f"[red]Error:[/] Corrupt catalog record.\n"
        f"  {escape(message)}\n"
        "  Remove the record with:  strudelshelf remove --id <id>"
    )


def err_not_audio(path: str) -> str:
    """File path does not look like a supported audio file."""
    return (
        f"[red]Error:[/] Not a supported audio file: '{escape(path)}'\n"
        "  Supported formats: .wav .mp3 .ogg .webm"
    )


def err_duplicate_sample(path: str) -> str:
    """Sample already registered in the catalog."""
    return (
        f"[yellow]Already in catalog:[/] '{escape(path)}'\n"
        "  Run:  strudelshelf list  to see registered samples."
    )


def err_sample_not_found(sample_id: str) -> str:
    """No catalog record with the given id."""
    return (
        f"[yellow]Sample not found:[/] '{escape(sample_id)}' is not in the catalog.\n"
        "  Run:  strudelshelf list  to see registered samples."
    )


def err_bad_input_file(path: str, message: str) -> str:
    """Snippet input file missing or not a list of samples."""
    return (
        f"[red]Error:[/] Cannot read samples from '{escape(path)}': {escape(message)}\n"
        "  Create one with:  strudelshelf search --json samples.json"
    )


def err_ssrf_blocked(url: str) -> str:
    """URL resolves to a private/reserved address."""
    return (
        f"[red]Error:[/] URL resolves to private address (SSRF protection): '{escape(url)}'\n"
        "  Use a publicly reachable URL."
    )


def err_preview_failed(url: str, message: str) -> str:
    """Preview download failed."""
    return (
        f"[red]Error:[/] Failed to fetch preview for '{escape(url)}'.\n"
        f"  {escape(message)}\n"
        "  Open the URL in a browser to check that it serves audio."
    )
