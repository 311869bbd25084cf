"""Client for the Yotpo products and reviews API.

Usage example:
    from yotpo_client import YotpoClient
    client = YotpoClient.from_env()
    products = client.get_products()
    client.create_product({'external_id': 'A-1', 'name': 'Lamp', 'price': '9.99'}, update=True)
    reviews = client.get_product_reviews()
"""
from .client import YotpoClient  # noqa: F401
from .exceptions import YotpoError, ConfigError, ApiRequestError, ApiAuthError, ApiRateLimitError  # noqa: F401
from .settings import YotpoSettings  # noqa: F401
