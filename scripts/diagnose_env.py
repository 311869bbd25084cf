#!/usr/bin/env python
"""Environment & connectivity diagnostics for the Yotpo client.

Usage:
  python scripts/diagnose_env.py [--token] [--config config/yotpo.yaml]

Without flags runs settings presence checks. Use --token to test the
access token exchange against the live API.
"""
from __future__ import annotations
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import requests

from yotpo_client.api import YotpoApi
from yotpo_client.exceptions import ConfigError, YotpoError, map_status_error
from yotpo_client.settings import CONFIG_PATH, ENV_KEYS, YotpoSettings


def mask(val: str | None) -> str | None:
    if not val:
        return val
    if len(val) <= 6:
        return '*' * len(val)
    return val[:4] + '...' + val[-4:]


def print_report(settings: YotpoSettings) -> bool:
    print('\n[SETTINGS PRESENCE]')
    widest = max(len(k) for k in ENV_KEYS)
    for key in ('api_key', 'api_secret'):
        raw = str(settings.get(key, '') or '')
        status = 'OK' if raw.strip() else 'MISSING'
        print(f"  {key.ljust(widest)} : {status:<8} {'' if status != 'OK' else mask(raw)}")
    try:
        headers = settings.additional_headers()
        print(f"  {'additional_headers'.ljust(widest)} : {len(headers)} configured ({', '.join(headers) or '-'})")
    except ConfigError as e:
        print(f"  {'additional_headers'.ljust(widest)} : INVALID  {e}")
    try:
        settings.validate()
    except ConfigError as e:
        print(f"\n[config] {e}")
        return False
    print()
    return True


def test_token(settings: YotpoSettings) -> None:
    api = YotpoApi(settings.api_key, settings.api_secret, additional_headers=settings.additional_headers(), timeout=20, error_mapper=map_status_error)
    print(f"[yotpo] POST {api.base_url('store')}/{mask(settings.api_key)}/access_tokens")
    try:
        token = api.get_access_token()
    except (YotpoError, requests.RequestException) as e:
        print(f"[yotpo] ERROR: {e}")
        if getattr(e, 'status_code', None) in (401, 403):
            print("HINT 401/403: Check that the API secret belongs to this store key.")
        return
    print(f"[yotpo] Token: {mask(token) or '(empty response)'}")


def main(argv: List[str]):
    flags = set(a for a in argv[1:] if a.startswith('--'))
    config_path = CONFIG_PATH
    if '--config' in argv[1:]:
        idx = argv.index('--config')
        if idx + 1 < len(argv):
            config_path = Path(argv[idx + 1])
    settings = YotpoSettings.load(config_path, env_file=PROJECT_ROOT / '.env')
    ok = print_report(settings)
    if '--token' in flags:
        if not ok:
            print('[yotpo] Skipping token test (invalid settings)')
            return
        test_token(settings)


if __name__ == '__main__':
    main(sys.argv)
