from __future__ import annotations
import json
import random
from http import HTTPStatus
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse
import requests

_RANDOM = random.Random()


def seed_mock(seed: Optional[int] = None) -> None:
    if seed is not None:
        _RANDOM.seed(seed)

ADJECTIVES = ["Smart", "Eco", "Ultra", "Mini", "Pro", "Air", "Max", "Hyper", "Nano", "Prime"]
NOUNS = ["Speaker", "Lamp", "Bottle", "Backpack", "Watch", "Camera", "Helmet", "Router", "Shirt", "Drone"]


def generate_mock_products(n: int = 20, price_min: float = 5.0, price_max: float = 300.0) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    for i in range(n):
        pid = f"mock-prod-{i+1}"
        items.append({
            'yotpo_id': 1000 + i + 1,
            'external_id': pid,
            'sku': f"SKU-{i+1:04d}",
            'name': f"{_RANDOM.choice(ADJECTIVES)} {_RANDOM.choice(NOUNS)}",
            'description': None,
            'url': f"https://example.com/products/{pid}",
            'price': str(round(_RANDOM.uniform(price_min, price_max), 2)),
        })
    return items


def generate_mock_bottom_lines(n: int = 20) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for i in range(n):
        out.append({
            'domain_key': f"mock-prod-{i+1}",
            'product_score': round(_RANDOM.uniform(1.0, 5.0), 1),
            'total_reviews': _RANDOM.randint(0, 500),
        })
    return out


def make_response(status_code: int, payload: Any, url: str = '') -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = HTTPStatus(status_code).phrase
    resp.url = url
    resp.encoding = 'utf-8'
    resp._content = b'' if payload is None else json.dumps(payload).encode('utf-8')
    resp.headers['Content-Type'] = 'application/json'
    return resp


class MockTransport:
    """In-memory stand-in for the Yotpo HTTP API.

    Serves access tokens, a mutable product list and paginated bottom lines,
    and records every request it receives in ``requests``.
    """

    def __init__(self, products: Optional[List[Dict[str, Any]]] = None, bottom_lines: Optional[List[Dict[str, Any]]] = None, token: str = 'mock-token'):
        self.products = list(generate_mock_products() if products is None else products)
        self.bottom_lines = list(generate_mock_bottom_lines() if bottom_lines is None else bottom_lines)
        self.token = token
        self.requests: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, *, headers: Dict[str, str] | None = None, params: Dict[str, Any] | None = None, data: Any | None = None) -> requests.Response:
        method = method.upper()
        self.requests.append({'method': method, 'url': url, 'headers': dict(headers or {}), 'params': dict(params or {}), 'data': data})
        path = urlparse(url).path
        status, payload = self._route(method, path, headers or {}, params or {}, data)
        resp = make_response(status, payload, url)
        resp.raise_for_status()
        return resp

    def _route(self, method: str, path: str, headers: Dict[str, str], params: Dict[str, Any], data: Any):
        if path.endswith('/access_tokens') and method == 'POST':
            return 200, {'access_token': self.token}
        if path.endswith('/bottom_lines') and method == 'GET':
            count = int(params.get('count', 100))
            page = int(params.get('page', 1))
            start = (page - 1) * count
            return 200, {'status': {'code': 200, 'message': 'OK'}, 'response': {'bottomlines': self.bottom_lines[start:start + count]}}
        if '/products' in path:
            if headers.get('X-Yotpo-Token') != self.token:
                return 401, {'status': {'code': 401, 'message': 'Unauthorized'}}
            return self._products(method, path.rsplit('/products', 1)[1].strip('/'), data)
        return 404, {'status': {'code': 404, 'message': 'Not Found'}}

    def _products(self, method: str, yotpo_id: str, data: Any):
        body = json.loads(data) if data else {}
        fields = body.get('product') or {}
        if method == 'GET' and not yotpo_id:
            return 200, {'products': self.products}
        if method == 'POST' and not yotpo_id:
            if any(p.get('external_id') == fields.get('external_id') for p in self.products):
                return 409, {'errors': [{'message': 'external_id already exists'}]}
            created = dict(fields, yotpo_id=1000 + len(self.products) + 1)
            self.products.append(created)
            return 200, {'product': created}
        if method == 'PATCH' and yotpo_id:
            for p in self.products:
                if str(p.get('yotpo_id')) == yotpo_id:
                    p.update(fields)
                    return 200, {'product': p}
        return 404, {'status': {'code': 404, 'message': 'Not Found'}}
