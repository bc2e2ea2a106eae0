from __future__ import annotations
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

COLUMNS = ['hash', 'name', 'label', 'limit', 'usage', 'disabled', 'created_at']


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def normalize_keys(keys: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out = []
    for k in keys:
        out.append({
            'hash': k.get('hash'),
            'name': k.get('name'),
            'label': k.get('label'),
            'limit': float(k['limit']) if k.get('limit') is not None else None,
            'usage': float(k.get('usage') or 0),
            'disabled': bool(k.get('disabled', False)),
            'created_at': k.get('created_at'),
        })
    return out


def keys_frame(keys: List[Dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(normalize_keys(keys), columns=COLUMNS)


def export_keys(keys: List[Dict[str, Any]], path: Path) -> Path:
    """Write a snapshot of ``keys`` as CSV or JSON, chosen by file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in ('.csv', '.json'):
        raise ValueError(f"Unsupported export format '{suffix or path.name}': use .csv or .json")
    path.parent.mkdir(parents=True, exist_ok=True)
    df = keys_frame(keys)
    if suffix == '.csv':
        df.to_csv(path, index=False)
    else:
        payload = {
            'exported_at_utc': utc_now_iso(),
            'count': len(df),
            'keys': json.loads(df.to_json(orient='records')),
        }
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    return path
