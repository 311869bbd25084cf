"""Command line access to the Yotpo client.

Examples:
  yotpo products --out data/yotpo_products.json
  yotpo products --refresh
  yotpo upsert --external-id A-1 --sku SKU-1 --name "Smart Lamp" --price 19.99 --update
  yotpo reviews --out data/yotpo_bottom_lines.json
  yotpo --fake reviews

Options:
  --config path to the YAML settings file
  --fake   serve synthetic data, no real API calls
  --no-cache keep cached responses in memory only
  --verbose
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
import requests
from .cache import MemoryCache
from .client import YotpoClient
from .exceptions import YotpoError, map_status_error
from .mock_provider import MockTransport, seed_mock
from .settings import CONFIG_PATH, YotpoSettings

logger = logging.getLogger('yotpo_client.cli')


def _non_empty(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError('must not be empty')
    return value


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(prog='yotpo', description='Yotpo products and reviews')
    p.add_argument('--config', default=str(CONFIG_PATH), help='YAML settings file')
    p.add_argument('--fake', action='store_true', help='Serve synthetic data (no real API calls)')
    p.add_argument('--seed', type=int, help='Deterministic seed for synthetic data')
    p.add_argument('--no-cache', action='store_true')
    p.add_argument('--verbose', action='store_true')
    sub = p.add_subparsers(dest='command', required=True)

    products = sub.add_parser('products', help='List Yotpo products keyed by external id')
    products.add_argument('--refresh', action='store_true', help='Reload the product list')
    products.add_argument('--out', help='Output JSON file path')

    upsert = sub.add_parser('upsert', help='Create a product, or update it with --update')
    upsert.add_argument('--external-id', required=True, type=_non_empty)
    upsert.add_argument('--sku')
    upsert.add_argument('--name')
    upsert.add_argument('--description')
    upsert.add_argument('--url')
    upsert.add_argument('--price')
    upsert.add_argument('--update', action='store_true', help='Patch the product when it already exists')
    upsert.add_argument('--refresh', action='store_true', help='Reload the product list before deciding')

    reviews = sub.add_parser('reviews', help='Fetch review bottom lines keyed by domain key')
    reviews.add_argument('--out', help='Output JSON file path')
    return p.parse_args(argv)


def build_client(args) -> YotpoClient:
    kwargs: Dict[str, Any] = {'error_mapper': map_status_error}
    if args.no_cache:
        kwargs['cache'] = MemoryCache()
    if args.fake:
        seed_mock(args.seed)
        settings = YotpoSettings({'api_key': 'fake-key', 'api_secret': 'fake-secret'})
        kwargs['transport'] = MockTransport()
        kwargs['cache'] = MemoryCache()
        return YotpoClient.from_settings(settings, **kwargs)
    return YotpoClient.from_env(args.config, **kwargs)


def _write_or_log(data: Dict[str, Any], out: Optional[str], label: str) -> None:
    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding='utf-8')
        logger.info('Wrote %d %s to %s', len(data), label, out_path)
    else:
        logger.info('%s: %s', label.capitalize(), json.dumps(data, ensure_ascii=False, indent=2))


def run(args) -> int:
    client = build_client(args)
    if args.command == 'products':
        _write_or_log(client.fetch_all_products(force_refresh=args.refresh), args.out, 'products')
    elif args.command == 'upsert':
        product = {
            'external_id': args.external_id,
            'sku': args.sku,
            'name': args.name,
            'description': args.description,
            'url': args.url,
            'price': args.price,
        }
        written = client.upsert_product(product, allow_update=args.update, refresh=args.refresh)
        # writes leave the index untouched, so it still reflects the state before the upsert
        existed = args.external_id in client.product_index
        print(('updated' if existed else 'created') if written else 'skipped')
    elif args.command == 'reviews':
        _write_or_log(client.fetch_all_reviews(), args.out, 'bottom lines')
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='[%(levelname)s] %(message)s')
    try:
        return run(args)
    except (YotpoError, requests.RequestException) as e:
        logger.error('%s', e)
        return 1


if __name__ == '__main__':
    sys.exit(main())
