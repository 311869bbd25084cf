from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict
from .api import YotpoApi
from .cache import FileCache
from .settings import CONFIG_PATH, YotpoSettings

logger = logging.getLogger(__name__)

PRODUCT_ATTRIBUTES = ('name', 'description', 'url', 'price')


class YotpoClient(YotpoApi):
    """Yotpo client for products and review bottom lines."""
    CACHE_TIME_REVIEWS = 300
    REVIEWS_PAGE_SIZE = 100

    def __init__(self, api_key: str, api_secret: str, **kwargs: Any):
        super().__init__(api_key, api_secret, **kwargs)
        self._products: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def from_settings(cls, settings: YotpoSettings, **kwargs: Any) -> 'YotpoClient':
        settings.validate()
        kwargs.setdefault('additional_headers', settings.additional_headers())
        kwargs.setdefault('timeout', settings.timeout)
        if 'cache' not in kwargs:
            cache_dir = settings.get('cache_dir')
            kwargs['cache'] = FileCache(cache_dir) if cache_dir else FileCache()
        return cls(settings.api_key, settings.api_secret, **kwargs)

    @classmethod
    def from_env(cls, config_path: Path | str = CONFIG_PATH, **kwargs: Any) -> 'YotpoClient':
        return cls.from_settings(YotpoSettings.load(config_path), **kwargs)

    def get_products(self, update_list: bool = False) -> Dict[str, Dict[str, Any]]:
        """Products known to Yotpo keyed by external id.

        The index is memoized and only reloaded when it is empty or when
        ``update_list`` is set.
        """
        if not self._products or update_list:
            response = self.call_api('products', access_token=True)
            products: Dict[str, Dict[str, Any]] = {}
            for product in response.get('products') or []:
                external_id = product.get('external_id')
                if external_id:
                    products[external_id] = product
            self._products = products
            logger.info('Loaded %d Yotpo products', len(products))
        return self._products

    @property
    def product_index(self) -> Dict[str, Dict[str, Any]]:
        """The last loaded product index, without triggering a listing call."""
        return self._products

    def create_product(self, product: Dict[str, Any], update: bool = False, refresh: bool = False) -> bool:
        """Create ``product`` in Yotpo, or patch it when it exists and ``update`` is set.

        Existence is decided against the last loaded product index, reloaded
        first when ``refresh`` is set. Writes do not update the index.
        Returns True when a remote write happened.
        """
        external_id = product.get('external_id')
        if not external_id:
            raise ValueError('product external_id is required')
        yotpo_products = self.get_products(update_list=refresh)
        attributes = {k: product[k] for k in PRODUCT_ATTRIBUTES if product.get(k) not in (None, '')}
        payload: Dict[str, Any] = {'product': attributes}

        existing = yotpo_products.get(external_id)
        if existing is None:
            payload['product']['external_id'] = external_id
            payload['product']['sku'] = product.get('sku')
            self.call_api('products', 'POST', {'body': json.dumps(payload)}, access_token=True)
            logger.info('Created Yotpo product %s', external_id)
            return True
        if update:
            self.call_api(f"products/{existing.get('yotpo_id')}", 'PATCH', {'body': json.dumps(payload)}, access_token=True)
            logger.info('Updated Yotpo product %s (yotpo_id=%s)', external_id, existing.get('yotpo_id'))
            return True
        logger.debug('Skipping existing Yotpo product %s', external_id)
        return False

    def get_product_reviews(self) -> Dict[str, Dict[str, Any]]:
        """Review bottom lines for every page, keyed by domain key."""
        reviews_by_key: Dict[str, Dict[str, Any]] = {}
        page = 1
        while True:
            options = {'query': {'count': self.REVIEWS_PAGE_SIZE, 'page': page}}
            response = self.call_api(
                'bottom_lines',
                options=options,
                resource_type='reviews',
                cache=True,
                cache_key=f'yotpo_reviews_{self.api_key}_c{self.REVIEWS_PAGE_SIZE}_p{page}',
                cache_ttl=self.CACHE_TIME_REVIEWS,
            )
            reviews = (response.get('response') or {}).get('bottomlines') or []
            if not reviews:
                break
            for review in reviews:
                reviews_by_key[review['domain_key']] = review
            page += 1
        return reviews_by_key

    # Operation names used by command line and automation callers
    def fetch_all_products(self, force_refresh: bool = False) -> Dict[str, Dict[str, Any]]:
        return self.get_products(update_list=force_refresh)

    def upsert_product(self, product: Dict[str, Any], allow_update: bool = False, refresh: bool = False) -> bool:
        return self.create_product(product, update=allow_update, refresh=refresh)

    def fetch_all_reviews(self) -> Dict[str, Dict[str, Any]]:
        return self.get_product_reviews()
