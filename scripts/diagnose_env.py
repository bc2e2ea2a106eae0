#!/usr/bin/env python
"""Environment & connectivity diagnostics for the OpenRouter credentials.

Usage:
  python scripts/diagnose_env.py [--check]

Without flags runs variable presence checks. Use --check to call /auth/key with
OPENROUTER_API_KEY and /keys (one record) with PROVISIONING_API_KEY.
"""
from __future__ import annotations
import os, sys
from pathlib import Path
from typing import Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from key_manager.client import KeysClient
from key_manager.config import API_KEY_ENV, BASE_URL_ENV, PROVISIONING_KEY_ENV, load_env_file
from key_manager.error_handler import describe_error
from key_manager.exceptions import ApiRequestError

MANDATORY: Dict[str, List[str]] = {
    'provisioning': [PROVISIONING_KEY_ENV],
    'regular': [API_KEY_ENV],
}

OPTIONAL = [BASE_URL_ENV]

console = Console()


def mask(val: str | None) -> str | None:
    if not val:
        return val
    if len(val) <= 12:
        return '*' * len(val)
    return val[:9] + '...' + val[-4:]


def check_presence(environ=None) -> Dict[str, Dict[str, str]]:
    env = os.environ if environ is None else environ
    report: Dict[str, Dict[str, str]] = {}
    for role, keys in MANDATORY.items():
        role_map = {}
        for k in keys:
            v = env.get(k)
            role_map[k] = 'OK' if v and v.strip() else 'MISSING'
        report[role] = role_map
    return report


def presence_table(environ=None) -> Table:
    env = os.environ if environ is None else environ
    table = Table(title='Credential presence', box=box.SIMPLE)
    table.add_column('Role', style='bold')
    table.add_column('Variable', style='cyan')
    table.add_column('Status', justify='center')
    table.add_column('Value', style='dim')
    for role, mapping in check_presence(env).items():
        for k, status in mapping.items():
            shown = mask(env.get(k)) if status == 'OK' else ''
            table.add_row(role, k, Text(status, style='green' if status == 'OK' else 'red'), Text(shown or ''))
    for k in OPTIONAL:
        if env.get(k):
            table.add_row('optional', k, Text('SET', style='yellow'), Text(env[k]))
    return table


def print_report(out: Console = console, environ=None) -> None:
    out.print()
    out.print(presence_table(environ))


def check_connectivity(client: KeysClient, out: Console = console) -> int:
    failures = 0
    probes = [
        ('auth/key', lambda: client.check_key_limit()),
        ('keys', lambda: client.list_keys(page_size=1, max_pages=1)),
    ]
    for name, probe in probes:
        try:
            probe()
        except ApiRequestError as e:
            failures += 1
            out.print(Text(f"[{name}] FAILED", style='red'))
            out.print(describe_error(e, f"probing /{name}"), markup=False, highlight=False)
            continue
        out.print(Text(f"[{name}] OK", style='green'))
    return failures


def main(argv: List[str]) -> int:
    flags = set(a for a in argv[1:] if a.startswith('--'))
    load_env_file(PROJECT_ROOT / '.env')
    print_report()
    if '--check' in flags:
        client = KeysClient.from_env()
        return 1 if check_connectivity(client) else 0
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
