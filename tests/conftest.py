"""
Общие фикстуры тестов
"""
from types import SimpleNamespace

import pytest

from shared.config.settings import Settings
from shared.database.base import create_engine, create_session_factory, init_db
from deals_bot.context import AppContext
from deals_bot.models import Deal, Product
from deals_bot.storage import (
    JsonAnalyticsStore,
    JsonCatalogStore,
    JsonUserRegistry,
    MemoryAnalyticsStore,
    MemoryCatalogStore,
    MemoryUserRegistry,
    SqlAnalyticsStore,
    SqlCatalogStore,
    SqlUserRegistry,
    Stores,
)


class FakeBot:
    """
    Бот без сети: запоминает отправленные сообщения.

    Чаты из fail_chats бросают исключение на любую отправку.
    """

    token = "123456:TEST"

    def __init__(self, fail_chats=()):
        self.fail_chats = set(fail_chats)
        self.sent = []
        self.session = SimpleNamespace(close=self._close)
        self.closed = False

    async def _close(self):
        self.closed = True

    def _check(self, chat_id):
        if chat_id in self.fail_chats:
            raise RuntimeError(f"Forbidden: bot was blocked by the user {chat_id}")

    async def send_message(self, chat_id, text, **kwargs):
        self.sent.append(("message", chat_id, text, kwargs))
        self._check(chat_id)

    async def send_photo(self, chat_id, photo, caption=None, **kwargs):
        self.sent.append(("photo", chat_id, caption, {"photo": photo, **kwargs}))
        self._check(chat_id)

    def sent_to(self, chat_id):
        return [item for item in self.sent if item[1] == chat_id]


def make_product(product_id: int, name: str, keywords, **extra) -> Product:
    data = {
        "id": product_id,
        "name": name,
        "description": f"{name} description",
        "price": 799.0,
        "mrp": 1999.0,
        "rating": 4.3,
        "buy_link": f"https://www.amazon.in/dp/{product_id}",
        "keywords": list(keywords),
    }
    data.update(extra)
    return Product(**data)


@pytest.fixture
def sample_products():
    """Небольшой каталог в порядке добавления"""
    return [
        make_product(1, "ASUS TUF Gaming Laptop", ["gaming laptop", "laptop"]),
        make_product(2, "boAt Rockerz 450", ["headphones", "bluetooth headphones", "boat"],
                     image="https://example.com/boat.jpg"),
        make_product(3, "HP Laptop 15s", ["laptop", "hp laptop"], product_link="https://www.flipkart.com/hp-15s"),
        make_product(4, "Redmi Note 13", ["phone", "smartphone", "redmi"]),
    ]


@pytest.fixture
def sample_deals():
    return [
        Deal(id=10, name="Meesho Kurti Set", price=299.0, mrp=999.0, rating=4.1,
             buy_link="https://www.meesho.com/kurti", category="Fashion",
             image="https://example.com/kurti.jpg"),
        Deal(id=11, name="Shopsy Steel Bottle", price=799.0, mrp=1999.0, rating=4.0,
             buy_link="https://www.shopsy.in/bottle", category="Home"),
    ]


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        telegram_bot_token="123456:TEST",
        storage_backend="memory",
        data_dir=tmp_path / "data",
        onboarding_delay=0,
        public_base_url="",
    )


@pytest.fixture
def fake_bot():
    return FakeBot()


@pytest.fixture
def memory_stores(sample_products):
    return Stores(
        MemoryCatalogStore(products=sample_products),
        MemoryAnalyticsStore(),
        MemoryUserRegistry(),
    )


@pytest.fixture
def json_stores(tmp_path):
    data_dir = tmp_path / "data"
    return Stores(
        JsonCatalogStore(data_dir),
        JsonAnalyticsStore(data_dir),
        JsonUserRegistry(data_dir),
    )


@pytest.fixture
async def sql_stores(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    session_factory = create_session_factory(engine)

    yield Stores(
        SqlCatalogStore(session_factory),
        SqlAnalyticsStore(session_factory),
        SqlUserRegistry(session_factory),
    )

    await engine.dispose()


@pytest.fixture(params=["memory", "json", "sql"])
async def stores(request, tmp_path):
    """Пустые хранилища каждого бэкенда: контракт должен совпадать"""
    if request.param == "memory":
        yield Stores(MemoryCatalogStore(), MemoryAnalyticsStore(), MemoryUserRegistry())
    elif request.param == "json":
        yield request.getfixturevalue("json_stores")
    else:
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'contract.db'}")
        await init_db(engine)
        session_factory = create_session_factory(engine)
        yield Stores(
            SqlCatalogStore(session_factory),
            SqlAnalyticsStore(session_factory),
            SqlUserRegistry(session_factory),
        )
        await engine.dispose()


@pytest.fixture
def ctx(test_settings, fake_bot, memory_stores):
    """Контекст приложения с каталогом из sample_products"""
    return AppContext.build(test_settings, bot=fake_bot, stores=memory_stores)
