import argparse
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from app.config.settings import settings
from app.services.store_adapter import SQLStoreAdapter
from app.utils.log import app_logger

FIRST_NAMES = ['John', 'Jane', 'Bob', 'Alice', 'Charlie', 'Diana', 'Eve', 'Frank', 'Grace', 'Henry']
LAST_NAMES = ['Smith', 'Johnson', 'Williams', 'Brown', 'Jones', 'Garcia', 'Miller', 'Davis', 'Rodriguez', 'Martinez']
PRODUCTS = [
    ('Laptop', 999.99), ('Smartphone', 699.99), ('Headphones', 199.99), ('Tablet', 499.99),
    ('Smartwatch', 299.99), ('Camera', 799.99), ('Printer', 249.99), ('Monitor', 349.99),
    ('Keyboard', 129.99), ('Mouse', 49.99),
]
STATUSES = ['active', 'inactive', 'pending', 'suspended']
ORDER_STATUSES = ['pending', 'completed', 'cancelled', 'shipped']
PAYMENT_METHODS = ['credit_card', 'debit_card', 'paypal', 'bank_transfer', 'crypto']
CITIES = [('New York', 'NY'), ('Los Angeles', 'CA'), ('Chicago', 'IL'), ('Houston', 'TX'), ('Phoenix', 'AZ')]
SETTING_CATEGORIES = ['system', 'user', 'security', 'notification']

USER_COUNT = 300
PRODUCT_COUNT = 400
ORDER_COUNT = 250
SETTINGS_COUNT = 30
STATS_DAYS = 20


def _past(rng: random.Random, now: datetime, max_seconds: float) -> datetime:
    return now - timedelta(seconds=rng.random() * max_seconds)


def generate_mock_data(rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    build the demo dataset: users, products, orders, settings and daily stats.
    pass a seeded `rng` for reproducible data.
    """
    rng = rng or random.Random()
    now = now or datetime.now()
    data: List[Dict[str, Any]] = []
    prices: Dict[str, float] = {}

    for i in range(1, USER_COUNT + 1):
        data.append({
            'key': f'user:{i}',
            'value': {
                'name': f'{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}',
                'email': f'user{i}@example.com',
                'age': rng.randint(18, 67),
                'status': rng.choice(STATUSES),
                'createdAt': _past(rng, now, 10_000_000).isoformat(),
                'lastLogin': _past(rng, now, 86_400).isoformat(),
                'preferences': {
                    'newsletter': rng.random() > 0.5,
                    'theme': rng.choice(['dark', 'light']),
                    'language': rng.choice(['en', 'es']),
                },
            },
        })

    for i in range(1, PRODUCT_COUNT + 1):
        name, base_price = rng.choice(PRODUCTS)
        price = round(base_price * (0.8 + rng.random() * 0.4), 2)
        prices[f'product:{i}'] = price
        data.append({
            'key': f'product:{i}',
            'value': {
                'name': f'{name} {i}',
                'price': f'{price:.2f}',
                'stock': rng.randint(0, 99),
                'category': 'Electronics',
                'rating': f'{rng.random() * 5:.1f}',
                'reviews': rng.randint(0, 999),
                'inStock': rng.random() > 0.2,
                'description': f'High-quality {name.lower()} with amazing features',
                'specifications': {
                    'color': rng.choice(['Black', 'White', 'Silver', 'Gold']),
                    'weight': f'{rng.randint(1, 5)}kg',
                    'dimensions': f'{rng.randint(10, 59)}x{rng.randint(5, 34)}x{rng.randint(2, 21)}cm',
                },
                'tags': [t for t in ['new', 'popular', 'bestseller'] if rng.random() > 0.5],
            },
        })

    for i in range(1, ORDER_COUNT + 1):
        items = []
        total = 0.0
        for _ in range(rng.randint(1, 5)):
            product_key = f'product:{rng.randint(1, PRODUCT_COUNT)}'
            quantity = rng.randint(1, 3)
            items.append({'productId': product_key, 'quantity': quantity})
            total += prices[product_key] * quantity
        order_date = _past(rng, now, 10_000_000)
        city, state = rng.choice(CITIES)
        data.append({
            'key': f'order:{i}',
            'value': {
                'userId': f'user:{rng.randint(1, USER_COUNT)}',
                'products': items,
                'total': f'{total:.2f}',
                'status': rng.choice(ORDER_STATUSES),
                'paymentMethod': rng.choice(PAYMENT_METHODS),
                'createdAt': order_date.isoformat(),
                'shippingAddress': {
                    'street': f'{rng.randint(1, 1000)} Main St',
                    'city': city,
                    'state': state,
                    'zipCode': str(rng.randint(10000, 99999)),
                },
                'trackingNumber': f'TRK{rng.randint(0, 999_999)}',
                'estimatedDelivery': (order_date + timedelta(days=7)).isoformat(),
            },
        })

    for i in range(1, SETTINGS_COUNT + 1):
        data.append({
            'key': f'settings:{i}',
            'value': {
                'name': f'Setting {i}',
                'value': rng.random() > 0.5,
                'lastModified': _past(rng, now, 10_000_000).isoformat(),
                'modifiedBy': f'user:{rng.randint(1, USER_COUNT)}',
                'category': rng.choice(SETTING_CATEGORIES),
            },
        })

    for i in range(1, STATS_DAYS + 1):
        data.append({
            'key': f'stats:daily:{i}',
            'value': {
                'date': (now - timedelta(days=i)).date().isoformat(),
                'visitors': rng.randint(1000, 5999),
                'sales': rng.randint(10, 109),
                'revenue': f'{rng.random() * 10000:.2f}',
                'topProducts': [f'product:{rng.randint(1, PRODUCT_COUNT)}' for _ in range(5)],
                'averageOrderValue': f'{rng.random() * 200:.2f}',
                'newUsers': rng.randint(0, 49),
                'activeUsers': rng.randint(100, 299),
                'conversionRate': f'{rng.random() * 5:.2f}',
                'peakHour': rng.randint(0, 23),
            },
        })

    return data


def seed_store(store: SQLStoreAdapter, entries: List[Dict[str, Any]]) -> int:
    """wipe `store` and write `entries`, returns the resulting key count"""
    store.init_schema()
    removed = store.clear()
    app_logger.info("seed: store cleared", removed=removed)
    written = store.put_many(entries)
    total = store.count()
    app_logger.info("seed: store seeded", written=written, total=total)
    return total


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the key-value store with demo data")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    parser.add_argument("--dry-run", action="store_true", help="generate the data without writing it")
    args = parser.parse_args(argv)

    entries = generate_mock_data(random.Random(args.seed))
    if args.dry_run:
        app_logger.info("seed: dry run", generated=len(entries))
        return

    from app.services.database import engine
    store = SQLStoreAdapter(engine, batch_size=settings.SCAN_BATCH_SIZE)
    seed_store(store, entries)


if __name__ == "__main__":
    main()
