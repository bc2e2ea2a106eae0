from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List

from rich import box
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def format_limit(value: Any) -> str:
    if value is None:
        return 'Unlimited'
    try:
        return f"${float(value):.2f}"
    except (TypeError, ValueError):
        return str(value)


def format_usage(value: Any) -> str:
    try:
        return f"{float(value or 0):.6f}"
    except (TypeError, ValueError):
        return str(value)


def format_created(value: Any) -> str:
    if not value:
        return 'N/A'
    if not isinstance(value, str):
        return str(value)
    try:
        dt = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return value
    return dt.strftime('%Y-%m-%d %H:%M')


def keys_table(keys: List[Dict[str, Any]]) -> Table:
    table = Table(title=f"API Keys ({len(keys)})", box=box.ROUNDED)
    table.add_column('#', justify='right', style='dim')
    table.add_column('Name', style='white')
    table.add_column('Hash', style='cyan')
    table.add_column('Limit', justify='right')
    table.add_column('Usage (USD)', justify='right')
    table.add_column('Disabled', justify='center')
    table.add_column('Created at', style='dim')

    if not keys:
        table.add_row('', '[dim]No API keys found[/dim]', '', '', '', '', '')
        return table
    for i, key in enumerate(keys, 1):
        disabled = Text('Yes', style='red') if key.get('disabled') else Text('No', style='green')
        table.add_row(
            str(i),
            Text(str(key.get('name') or '(no name)')),
            Text(str(key.get('hash', ''))),
            format_limit(key.get('limit')),
            format_usage(key.get('usage')),
            disabled,
            format_created(key.get('created_at')),
        )
    return table


def key_panel(record: Any, title: str, border_style: str = 'cyan') -> Panel:
    """Pretty JSON of a single response payload."""
    return Panel(JSON.from_data(record, indent=2, default=str), title=f"[bold]{title}[/bold]", border_style=border_style)


def new_key_panel(result: Dict[str, Any]) -> Panel:
    secret = result.get('key') if isinstance(result, dict) else None
    if not secret:
        return Panel(
            '[yellow]API key not found in the response. Check the API response structure.[/yellow]',
            title='[bold]New API Key[/bold]',
            border_style='yellow',
        )
    return Panel(
        f"[bold green]API Key Created![/bold green]\n\n"
        f"[cyan]Key:[/cyan] [bold]{secret}[/bold]\n\n"
        f"[bold yellow]Store this key in a safe place. It will not be shown again.[/bold yellow]",
        border_style='green',
    )
