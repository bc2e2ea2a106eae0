"""Interactive manager for OpenRouter API keys.

Usage:
  openrouter-keys                          # interactive menu
  openrouter-keys list --out keys.csv      # list all keys, optional CSV/JSON export
  openrouter-keys get <hash>
  openrouter-keys create --name "My App" --limit 10
  openrouter-keys update <hash> --disable
  openrouter-keys delete <hash> --force
  openrouter-keys limit                    # usage/limit of OPENROUTER_API_KEY

Credentials come from PROVISIONING_API_KEY (key management) and
OPENROUTER_API_KEY (limit check), read from the environment or a local .env.
"""
from __future__ import annotations
import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from .client import UNSET, KeysClient
from .config import Settings
from .error_handler import describe_error
from .exceptions import ApiRequestError
from .export import export_keys
from .formatting import key_panel, keys_table, new_key_panel

logger = logging.getLogger(__name__)

console = Console()

KEY_PREFIX = 'sk-or-v1-'

MENU = [
    ('1', 'List API keys (via Provisioning Key)'),
    ('2', 'Get details of a specific key (by Hash)'),
    ('3', 'Create new API key'),
    ('4', 'Update API key (by Hash)'),
    ('5', 'Delete API key (by Hash)'),
    ('6', 'Check limits of the current API key (.env)'),
    ('q', 'Exit'),
]


# ============================================================================
# Actions (shared by the menu and the sub-commands)
# ============================================================================

def show_keys(client: KeysClient, out: Console, export_path: Optional[Path] = None) -> List[Dict[str, Any]]:
    out.print('\nFetching complete list of API keys (with pagination)...')
    keys = client.list_keys()
    out.print()
    out.print(keys_table(keys))
    if export_path is not None:
        written = export_keys(keys, export_path)
        out.print(f"[green]Exported {len(keys)} keys to {written}[/green]")
    return keys


def show_key(client: KeysClient, out: Console, key_hash: str) -> Any:
    record = client.get_key(key_hash)
    out.print(key_panel(record, 'Key details'))
    return record


def create_key(client: KeysClient, out: Console, name: str, label: Any = UNSET, limit: Any = UNSET) -> Dict[str, Any]:
    result = client.create_key(name, label=label, limit=limit)
    out.print('[green]API key created successfully![/green]')
    details = result.get('data', result) if isinstance(result, dict) else result
    out.print(key_panel(details, 'Details of the new key', border_style='green'))
    out.print(new_key_panel(result))
    return result


def update_key(client: KeysClient, out: Console, key_hash: str, updates: Dict[str, Any]) -> Any:
    record = client.update_key(key_hash, updates)
    if record is None:
        out.print('[yellow]No fields were provided for update.[/yellow]')
        return None
    out.print('[green]API key updated successfully![/green]')
    out.print(key_panel(record, 'Details of the updated key', border_style='green'))
    return record


def delete_key(client: KeysClient, out: Console, key_hash: str) -> Any:
    record = client.delete_key(key_hash)
    out.print(f"[green]DELETE request sent successfully for hash {key_hash.strip()}.[/green]")
    if record:
        out.print(key_panel(record, 'Deleted key details', border_style='red'))
    else:
        out.print('[dim](Status 204 No Content or empty response)[/dim]')
    return record


def show_limit(client: KeysClient, out: Console, api_key: Optional[str] = None) -> Any:
    source = 'provided' if api_key else 'from environment'
    out.print(f"\nChecking information and limits for the API key ({source})...")
    info = client.check_key_limit(api_key)
    out.print(key_panel(info, 'Key information and limits'))
    return info


def run_action(out: Console, context: str, action: Callable[[], Any]) -> bool:
    """Run one action; print a classified error and return False when it fails."""
    try:
        action()
    except (ApiRequestError, ValueError, OSError) as e:
        out.print(describe_error(e, context), style='red', markup=False, highlight=False)
        return False
    except Exception as e:
        logger.exception('Unexpected error while %s', context)
        out.print(describe_error(e, context), style='red', markup=False, highlight=False)
        return False
    return True


# ============================================================================
# Prompt helpers
# ============================================================================

def parse_limit(text: str) -> Optional[float]:
    """Blank means unlimited (None); anything else must be a non-negative number."""
    text = text.strip()
    if text == '':
        return None
    try:
        value = float(text)
    except ValueError:
        raise ValueError('Please enter a positive number, 0, or leave blank for unlimited.') from None
    if not math.isfinite(value) or value < 0:
        raise ValueError('Please enter a positive number, 0, or leave blank for unlimited.')
    return value


def ask_required(prompt: str, what: str) -> str:
    while True:
        value = Prompt.ask(prompt, default='', show_default=False, console=console).strip()
        if value:
            return value
        console.print(f"[red]{what} cannot be empty.[/red]")


def ask_limit(prompt: str) -> Optional[float]:
    while True:
        raw = Prompt.ask(prompt, default='', show_default=False, console=console)
        try:
            return parse_limit(raw)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")


def ask_api_key() -> str:
    while True:
        value = Prompt.ask(f"Enter the API key ({KEY_PREFIX}...) you want to check", password=True, console=console).strip()
        if not value:
            console.print('[red]Key cannot be empty.[/red]')
        elif not value.startswith(KEY_PREFIX):
            console.print(f"[red]Invalid key format. Must start with {KEY_PREFIX}[/red]")
        else:
            return value


# ============================================================================
# Interactive flows
# ============================================================================

def create_flow(client: KeysClient) -> None:
    name = ask_required('Enter the name for the new key (required)', 'Name')
    label = Prompt.ask('Enter a label for the key (optional, leave blank for none)', default='', show_default=False, console=console).strip()
    limit = ask_limit('Enter a credit limit in USD (optional, leave blank for unlimited)')
    create_key(client, console, name, label=label or None, limit=limit)


def update_flow(client: KeysClient) -> None:
    key_hash = ask_required('Enter the Hash of the key you want to UPDATE', 'Hash')
    updates: Dict[str, Any] = {}
    if Confirm.ask('Update the name?', default=False, console=console):
        updates['name'] = ask_required('New name', 'Name')
    if Confirm.ask('Update the label?', default=False, console=console):
        label = Prompt.ask('New label (leave blank to remove)', default='', show_default=False, console=console).strip()
        updates['label'] = label or None
    if Confirm.ask('Update the credit limit (USD)?', default=False, console=console):
        updates['limit'] = ask_limit('New limit (leave blank for unlimited)')
    if Confirm.ask('Update the status (disable/enable)?', default=False, console=console):
        updates['disabled'] = Confirm.ask('Disable the key?', default=False, console=console)
    update_key(client, console, key_hash, updates)


def delete_flow(client: KeysClient) -> None:
    key_hash = ask_required('Enter the Hash of the key you want to DELETE PERMANENTLY', 'Hash')
    question = (
        f"[red]WARNING:[/red] Are you SURE you want to delete the key with hash {key_hash}? "
        f"[bold]THIS ACTION IS IRREVERSIBLE![/bold]"
    )
    if not Confirm.ask(question, default=False, console=console):
        console.print('[yellow]Deletion cancelled by user.[/yellow]')
        return
    console.print('Confirmed. Proceeding with deletion...')
    delete_key(client, console, key_hash)


def limit_flow(client: KeysClient) -> None:
    api_key = None
    if Confirm.ask('Do you want to check a specific key (instead of the default from .env)?', default=False, console=console):
        api_key = ask_api_key()
    show_limit(client, console, api_key)


def main_menu(client: KeysClient) -> None:
    flows: Dict[str, Callable[[], None]] = {
        '1': lambda: show_keys(client, console),
        '2': lambda: show_key(client, console, ask_required('Enter the Hash of the key you want to query', 'Hash')),
        '3': lambda: create_flow(client),
        '4': lambda: update_flow(client),
        '5': lambda: delete_flow(client),
        '6': lambda: limit_flow(client),
    }
    contexts = {
        '1': 'listing keys',
        '2': 'getting key details',
        '3': 'creating key',
        '4': 'updating key',
        '5': 'deleting key',
        '6': 'checking limits',
    }
    while True:
        console.print()
        console.print(Panel.fit('[bold cyan]OpenRouter API Key Manager[/bold cyan]', border_style='cyan'))
        for choice, label in MENU:
            console.print(f"  [cyan]{choice}[/cyan]  {label}")
        console.print()
        choice = Prompt.ask('What would you like to do?', choices=[c for c, _ in MENU], default='1', console=console)
        if choice == 'q':
            console.print('[yellow]Exiting...[/yellow]')
            return
        run_action(console, contexts[choice], flows[choice])


# ============================================================================
# Sub-commands
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='openrouter-keys', description='Manage OpenRouter API keys')
    p.add_argument('--env-file', type=Path, default=Path('.env'), help='dotenv file to load (default: ./.env)')
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument('--quiet', action='store_true', help='only log warnings and errors')
    verbosity.add_argument('--debug', action='store_true', help='log request bodies too')
    sub = p.add_subparsers(dest='command')

    list_p = sub.add_parser('list', help='List all API keys')
    list_p.add_argument('--out', type=Path, help='Export the listing to a .csv or .json file')

    get_p = sub.add_parser('get', help='Show one key by hash')
    get_p.add_argument('hash')

    create_p = sub.add_parser('create', help='Create a new API key')
    create_p.add_argument('--name', required=True)
    create_p.add_argument('--label')
    create_limit = create_p.add_mutually_exclusive_group()
    create_limit.add_argument('--limit', type=float, help='Credit limit in USD')
    create_limit.add_argument('--unlimited', action='store_true', help='Send an explicit null limit')

    update_p = sub.add_parser('update', help='Update a key by hash')
    update_p.add_argument('hash')
    update_p.add_argument('--name')
    update_label = update_p.add_mutually_exclusive_group()
    update_label.add_argument('--label')
    update_label.add_argument('--clear-label', action='store_true')
    update_limit = update_p.add_mutually_exclusive_group()
    update_limit.add_argument('--limit', type=float)
    update_limit.add_argument('--unlimited', action='store_true')
    update_status = update_p.add_mutually_exclusive_group()
    update_status.add_argument('--disable', dest='disabled', action='store_const', const=True)
    update_status.add_argument('--enable', dest='disabled', action='store_const', const=False)

    delete_p = sub.add_parser('delete', help='Delete a key by hash')
    delete_p.add_argument('hash')
    delete_p.add_argument('-f', '--force', action='store_true', help='Skip confirmation')

    limit_p = sub.add_parser('limit', help='Check usage and limit of an API key')
    limit_p.add_argument('--key', help='Key to check instead of OPENROUTER_API_KEY')
    return p


def updates_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    updates: Dict[str, Any] = {}
    if args.name is not None:
        updates['name'] = args.name
    if args.clear_label:
        updates['label'] = None
    elif args.label is not None:
        updates['label'] = args.label
    if args.unlimited:
        updates['limit'] = None
    elif args.limit is not None:
        updates['limit'] = args.limit
    if args.disabled is not None:
        updates['disabled'] = args.disabled
    return updates


def run_command(client: KeysClient, args: argparse.Namespace) -> bool:
    cmd = args.command
    if cmd == 'list':
        return run_action(console, 'listing keys', lambda: show_keys(client, console, args.out))
    if cmd == 'get':
        return run_action(console, 'getting key details', lambda: show_key(client, console, args.hash))
    if cmd == 'create':
        limit = None if args.unlimited else (UNSET if args.limit is None else args.limit)
        label = UNSET if args.label is None else args.label
        return run_action(console, f"creating key \"{args.name}\"", lambda: create_key(client, console, args.name, label=label, limit=limit))
    if cmd == 'update':
        return run_action(console, 'updating key', lambda: update_key(client, console, args.hash, updates_from_args(args)))
    if cmd == 'delete':
        if not args.force and not Confirm.ask(f"Delete the key with hash {args.hash}? This cannot be undone", default=False, console=console):
            console.print('[yellow]Deletion cancelled by user.[/yellow]')
            return True
        return run_action(console, f"deleting key hash \"{args.hash}\"", lambda: delete_key(client, console, args.hash))
    if cmd == 'limit':
        return run_action(console, 'checking limits', lambda: show_limit(client, console, args.key))
    raise ValueError(f"Unknown command: {cmd}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.debug else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format='[%(levelname)s] %(message)s')

    settings = Settings.from_env(args.env_file)
    client = KeysClient(settings)

    if args.command is not None:
        return 0 if run_command(client, args) else 1

    try:
        main_menu(client)
    except KeyboardInterrupt:
        console.print('\n[yellow]Cancelled.[/yellow]')
    except Exception as e:
        logger.exception('Unexpected error in the manager')
        console.print(f"An unexpected error occurred in the manager: {e}", style='red', markup=False)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
