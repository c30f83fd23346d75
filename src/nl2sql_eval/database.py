"""
Database Bootstrap
==================

E-commerce SQLite schema and the sample data the ground truth was recorded
against.
"""

import sqlite3
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

CREATE_CUSTOMERS_TABLE = """
CREATE TABLE IF NOT EXISTS Customers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_customers_name ON Customers(name);"""

CREATE_ORDERS_TABLE = """
CREATE TABLE IF NOT EXISTS Orders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_id INTEGER REFERENCES Customers(id),
    shipping_status TEXT CHECK (shipping_status IN ('pending', 'shipped', 'delivered')) NOT NULL,
    FOREIGN KEY(customer_id) REFERENCES Customers(id)
);"""

CREATE_PRODUCTS_TABLE = """
CREATE TABLE IF NOT EXISTS Products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    price REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_products_name ON Products(name);"""

CREATE_ORDER_PRODUCTS_TABLE = """
CREATE TABLE IF NOT EXISTS Order_Products (
    order_id INTEGER REFERENCES Orders(id),
    product_id INTEGER REFERENCES Products(id),
    quantity INTEGER NOT NULL,
    PRIMARY KEY(order_id, product_id)
);"""

SCHEMA_TABLES = (
    CREATE_CUSTOMERS_TABLE,
    CREATE_ORDERS_TABLE,
    CREATE_PRODUCTS_TABLE,
    CREATE_ORDER_PRODUCTS_TABLE,
)


@dataclass(frozen=True)
class ProductQuantity:
    name: str
    quantity: int


def _sample_customers() -> list[tuple[str, str]]:
    return [(f"Customer {i}", f"customer{i}@example.com") for i in range(1, 11)]


def _sample_products() -> list[tuple[str, float]]:
    products = [(f"Product {i}", i * 100.0) for i in range(1, 10)]
    products.append(("Product 10", 10000.0))
    return products


def _sample_orders() -> list[tuple[str, list[ProductQuantity], str]]:
    # Customer n orders products 1..n, i units of product i
    orders = []
    for n in range(1, 10):
        items = [ProductQuantity(f"Product {i}", i) for i in range(1, n + 1)]
        status = {1: "pending", 2: "shipped"}.get(n, "delivered")
        orders.append((f"Customer {n}", items, status))
    return orders


def _lookup_id(conn: sqlite3.Connection, table: str, name: str) -> int:
    row = conn.execute(f"SELECT id FROM {table} WHERE name = ?", (name,)).fetchone()
    if row is None:
        raise LookupError(f"No row in {table} named '{name}'")
    return row[0]


def create_order(
    conn: sqlite3.Connection,
    customer_name: str,
    products: list[ProductQuantity],
    shipping_status: str,
) -> int:
    """
    Insert an order and its line items in one transaction.

    Returns:
        The new order id
    """
    customer_id = _lookup_id(conn, "Customers", customer_name)
    with conn:
        cursor = conn.execute(
            "INSERT INTO Orders (customer_id, shipping_status) VALUES (?, ?)",
            (customer_id, shipping_status),
        )
        order_id = cursor.lastrowid
        for item in products:
            product_id = _lookup_id(conn, "Products", item.name)
            conn.execute(
                "INSERT INTO Order_Products (order_id, product_id, quantity) VALUES (?, ?, ?)",
                (order_id, product_id, item.quantity),
            )
    return order_id


def create_schema(conn: sqlite3.Connection) -> None:
    for ddl in SCHEMA_TABLES:
        conn.executescript(ddl)


def insert_sample_data(conn: sqlite3.Connection) -> None:
    with conn:
        conn.executemany("INSERT INTO Customers (name, email) VALUES (?, ?)", _sample_customers())
        conn.executemany("INSERT INTO Products (name, price) VALUES (?, ?)", _sample_products())
    for customer, items, status in _sample_orders():
        create_order(conn, customer, items, status)


def initialise_database(path: str | Path) -> sqlite3.Connection:
    """
    Open the evaluation database, creating and seeding it if it does not exist.

    An existing file is opened as is; its contents are never modified.
    Pass ``":memory:"`` for a throwaway seeded database.
    """
    path = str(path)
    if path != ":memory:" and Path(path).exists():
        logger.info("database_opened", path=path)
        return sqlite3.connect(path)

    conn = sqlite3.connect(path)
    logger.info("database_creating", path=path)
    create_schema(conn)
    insert_sample_data(conn)
    logger.info("database_seeded", path=path)
    return conn
