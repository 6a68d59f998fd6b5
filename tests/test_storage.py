"""
Тесты хранилищ (memory, json, sql)
"""
import json

import pytest

from deals_bot.models import Deal, ProductCreate, QueryStatus, UserRecord
from deals_bot.database.models import ProductViewRow
from deals_bot.storage import JsonAnalyticsStore, JsonCatalogStore, JsonUserRegistry
from deals_bot.storage.json_files import JsonDocument


def new_product(name="Realme Buds", keywords=("earbuds", "realme")) -> ProductCreate:
    return ProductCreate(
        name=name,
        description="True wireless earbuds",
        price=1299,
        mrp=2999,
        rating=4.2,
        buy_link="https://www.flipkart.com/realme-buds",
        keywords=list(keywords),
    )


class TestCatalogContract:
    """Одинаковое поведение каталога во всех бэкендах"""

    @pytest.mark.asyncio
    async def test_append_assigns_unique_ids(self, stores):
        first = await stores.catalog.append_product(new_product("First"))
        second = await stores.catalog.append_product(new_product("Second"))

        assert first.id != second.id
        products = await stores.catalog.list_products()
        assert [p.name for p in products] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_get_product(self, stores):
        product = await stores.catalog.append_product(new_product())

        found = await stores.catalog.get_product(product.id)

        assert found is not None
        assert found.name == "Realme Buds"
        assert found.keywords == ["earbuds", "realme"]
        assert await stores.catalog.get_product(product.id + 1000) is None

    @pytest.mark.asyncio
    async def test_remove_product(self, stores):
        keep = await stores.catalog.append_product(new_product("Keep"))
        drop = await stores.catalog.append_product(new_product("Drop"))

        assert await stores.catalog.remove_product(drop.id) is True
        assert await stores.catalog.remove_product(drop.id) is False

        products = await stores.catalog.list_products()
        assert [p.id for p in products] == [keep.id]

    @pytest.mark.asyncio
    async def test_replace_deals_replaces_whole_list(self, stores, sample_deals):
        await stores.catalog.replace_deals(sample_deals)
        assert [d.name for d in await stores.catalog.list_deals()] == [
            "Meesho Kurti Set", "Shopsy Steel Bottle",
        ]

        await stores.catalog.replace_deals(sample_deals[1:])
        deals = await stores.catalog.list_deals()
        assert [d.id for d in deals] == [11]
        assert deals[0].category == "Home"


class TestAnalyticsContract:
    """Одинаковое поведение аналитики во всех бэкендах"""

    @pytest.mark.asyncio
    async def test_record_query_increments_traffic(self, stores):
        before = (await stores.analytics.read()).traffic

        for text in ["laptop", "phone", "headphones"]:
            await stores.analytics.record_query(100, text)

        snapshot = await stores.analytics.read()
        assert snapshot.traffic == before + 3
        assert [q.query for q in snapshot.queries] == ["laptop", "phone", "headphones"]
        assert all(q.status == QueryStatus.PENDING for q in snapshot.queries)
        assert all(q.chat_id == 100 for q in snapshot.queries)

    @pytest.mark.asyncio
    async def test_query_ids_are_unique(self, stores):
        first = await stores.analytics.record_query(1, "a")
        second = await stores.analytics.record_query(1, "b")

        assert first.id != second.id
        assert first.id > 0

    @pytest.mark.asyncio
    async def test_record_view_counts_exactly(self, stores):
        for _ in range(4):
            await stores.analytics.record_view(42)
        await stores.analytics.record_view(7)

        snapshot = await stores.analytics.read()
        assert snapshot.views_for(42) == 4
        assert snapshot.views_for(7) == 1
        assert snapshot.views_for(999) == 0
        assert set(snapshot.product_views) == {"42", "7"}

    @pytest.mark.asyncio
    async def test_view_marks_originating_query_success(self, stores):
        laptop = await stores.analytics.record_query(1, "laptop")
        phone = await stores.analytics.record_query(1, "phone")

        await stores.analytics.record_view(3, query_id=laptop.id, chat_id=1)

        statuses = {q.id: q.status for q in (await stores.analytics.read()).queries}
        assert statuses[laptop.id] == QueryStatus.SUCCESS
        assert statuses[phone.id] == QueryStatus.PENDING

    @pytest.mark.asyncio
    async def test_view_with_unknown_query_id(self, stores):
        await stores.analytics.record_query(1, "laptop")

        await stores.analytics.record_view(3, query_id=999, chat_id=1)

        snapshot = await stores.analytics.read()
        assert snapshot.views_for(3) == 1
        assert snapshot.queries[0].status == QueryStatus.PENDING

    @pytest.mark.asyncio
    async def test_view_from_other_chat_keeps_query_pending(self, stores):
        """Чужой query_id в callback data не меняет статус запроса"""
        laptop = await stores.analytics.record_query(1, "laptop")

        await stores.analytics.record_view(3, query_id=laptop.id, chat_id=2)
        await stores.analytics.record_view(3, query_id=laptop.id)

        snapshot = await stores.analytics.read()
        assert snapshot.views_for(3) == 2
        assert snapshot.queries[0].status == QueryStatus.PENDING


class TestUserRegistryContract:
    """Одинаковое поведение реестра пользователей во всех бэкендах"""

    @pytest.mark.asyncio
    async def test_register_new_and_existing(self, stores):
        assert await stores.users.register(UserRecord(chat_id=1, first_name="Asha")) is True
        assert await stores.users.register(UserRecord(chat_id=1, first_name="Asha")) is False
        assert await stores.users.register(UserRecord(chat_id=2)) is True

        assert sorted(await stores.users.list_chat_ids()) == [1, 2]

    @pytest.mark.asyncio
    async def test_register_updates_display_fields(self, stores):
        await stores.users.register(UserRecord(chat_id=5, first_name="Ravi", username="ravi"))
        await stores.users.register(UserRecord(chat_id=5, first_name="Ravi K"))

        user = await stores.users.get_user(5)
        assert user.first_name == "Ravi K"
        assert user.username == "ravi"  # Пустое поле не затирает известное


class TestJsonFiles:
    """Особенности файлового бэкенда"""

    @pytest.mark.asyncio
    async def test_initialize_creates_default_files(self, tmp_path):
        data_dir = tmp_path / "data"
        analytics = JsonAnalyticsStore(data_dir)
        catalog = JsonCatalogStore(data_dir)

        await analytics.initialize()
        await catalog.initialize()

        assert json.loads((data_dir / "analytics.json").read_text()) == {
            "queries": [], "traffic": 0, "productViews": {},
        }
        assert json.loads((data_dir / "products.json").read_text()) == []
        assert json.loads((data_dir / "today-deals.json").read_text()) == []

    @pytest.mark.asyncio
    async def test_uses_camel_case_fields(self, tmp_path):
        catalog = JsonCatalogStore(tmp_path)

        await catalog.append_product(new_product())

        raw = json.loads((tmp_path / "products.json").read_text())
        assert raw[0]["buyLink"] == "https://www.flipkart.com/realme-buds"
        assert "buy_link" not in raw[0]

    @pytest.mark.asyncio
    async def test_malformed_file_reads_as_empty(self, tmp_path):
        (tmp_path / "products.json").write_text("{not json", encoding="utf-8")
        (tmp_path / "analytics.json").write_text("[1, 2, 3]", encoding="utf-8")

        assert await JsonCatalogStore(tmp_path).list_products() == []
        snapshot = await JsonAnalyticsStore(tmp_path).read()
        assert snapshot.traffic == 0
        assert snapshot.queries == []

    @pytest.mark.asyncio
    async def test_malformed_record_is_skipped(self, tmp_path):
        (tmp_path / "products.json").write_text(json.dumps([
            {"id": 1, "name": "Good", "price": 10, "mrp": 20, "buyLink": "https://a.in", "keywords": ["good"]},
            {"id": 2, "name": "No buy link", "price": 10, "mrp": 20},
            "garbage",
        ]), encoding="utf-8")

        products = await JsonCatalogStore(tmp_path).list_products()

        assert [p.id for p in products] == [1]

    @pytest.mark.asyncio
    async def test_reads_legacy_analytics(self, tmp_path):
        """Старый analytics.json: запросы без id, chatId строкой"""
        (tmp_path / "analytics.json").write_text(json.dumps({
            "queries": [
                {"chatId": "555", "query": "laptop", "timestamp": "2024-11-02T10:00:00.000Z", "status": "Success"},
                {"chatId": 556, "query": "phone", "timestamp": "2024-11-02T10:05:00.000Z", "status": "Pending"},
            ],
            "traffic": 2,
            "productViews": {"1731234567890": 3},
        }), encoding="utf-8")

        store = JsonAnalyticsStore(tmp_path)
        snapshot = await store.read()
        assert [q.id for q in snapshot.queries] == [1, 2]
        assert snapshot.queries[0].chat_id == 555
        assert snapshot.views_for(1731234567890) == 3

        record = await store.record_query(557, "headphones")
        assert record.id == 3
        assert (await store.read()).traffic == 3

    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self, tmp_path):
        """
        Ошибка записи не пробрасывается: данные теряются молча.

        data_dir указывает на файл, поэтому создать products.json нельзя.
        """
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        catalog = JsonCatalogStore(blocker)

        product = await catalog.append_product(new_product())

        assert product.name == "Realme Buds"
        assert await catalog.list_products() == []

    @pytest.mark.asyncio
    async def test_unsaved_query_gets_zero_id(self, tmp_path, monkeypatch):
        """
        Запрос, который не удалось записать, получает id=0.

        Иначе его id достался бы следующему запросу из другого чата,
        и выбор по первым результатам отметил бы чужой запрос.
        """
        store = JsonAnalyticsStore(tmp_path)
        laptop = await store.record_query(1, "laptop")

        def broken_write(data):
            raise OSError("No space left on device")

        monkeypatch.setattr(store.document, "_write_sync", broken_write)
        phone = await store.record_query(2, "phone")
        monkeypatch.undo()

        tv = await store.record_query(3, "tv")
        await store.record_view(99, query_id=tv.id, chat_id=2)

        assert (laptop.id, phone.id, tv.id) == (1, 0, 2)
        snapshot = await store.read()
        assert [(q.chat_id, q.query, q.status) for q in snapshot.queries] == [
            (1, "laptop", QueryStatus.PENDING),
            (3, "tv", QueryStatus.PENDING),
        ]

    @pytest.mark.asyncio
    async def test_write_reports_success(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")

        assert await JsonDocument(tmp_path / "users.json", list).write([]) is True
        assert await JsonDocument(blocker / "users.json", list).write([]) is False

    @pytest.mark.asyncio
    async def test_concurrent_queries_are_not_lost(self, tmp_path):
        """Циклы read-modify-write одного файла сериализуются внутри процесса"""
        import asyncio

        store = JsonAnalyticsStore(tmp_path)

        await asyncio.gather(*(store.record_query(i, f"q{i}") for i in range(10)))

        snapshot = await store.read()
        assert snapshot.traffic == 10
        assert len({q.id for q in snapshot.queries}) == 10

    @pytest.mark.asyncio
    async def test_users_file(self, tmp_path):
        registry = JsonUserRegistry(tmp_path)

        await registry.register(UserRecord(chat_id=77, first_name="Meera"))

        raw = json.loads((tmp_path / "users.json").read_text())
        assert raw == [{"chatId": 77, "firstName": "Meera", "lastName": None, "username": None}]


class TestDealModel:
    """Разбор данных формы"""

    def test_keywords_from_comma_separated_string(self):
        product = ProductCreate.model_validate({
            "name": "Boat Airdopes",
            "price": "999",
            "mrp": "2990",
            "buyLink": "https://www.amazon.in/airdopes",
            "keywords": "earbuds, boat ,, airdopes",
        })

        assert product.keywords == ["earbuds", "boat", "airdopes"]
        assert product.price == 999.0

    def test_deal_id_is_optional(self):
        deal = Deal.model_validate({"name": "X", "price": 1, "mrp": 2, "buyLink": "https://x.in"})

        assert deal.id is None
        assert deal.category is None


class TestSqlViews:
    """Счётчик просмотров в SQL-бэкенде"""

    @pytest.mark.asyncio
    async def test_concurrent_first_view_is_not_lost(self, sql_stores, monkeypatch):
        """
        Два первых просмотра одного товара: оба UPDATE не нашли строку.

        Второй INSERT упирается в первичный ключ; транзакция повторяется
        и попадает в UPDATE, статус запроса тоже сохраняется.
        """
        analytics = sql_stores.analytics
        query = await analytics.record_query(1, "boat")
        increment_view = analytics._increment_view
        calls = []

        async def racing_increment(session, product_id):
            calls.append(product_id)
            if len(calls) == 1:
                # Параллельная транзакция успевает вставить строку первой
                async with analytics.session_factory() as other:
                    other.add(ProductViewRow(product_id=product_id, views=1))
                    await other.commit()
                session.add(ProductViewRow(product_id=product_id, views=1))
                await session.flush()
                return
            await increment_view(session, product_id)

        monkeypatch.setattr(analytics, "_increment_view", racing_increment)

        await analytics.record_view(2, query_id=query.id, chat_id=1)

        snapshot = await analytics.read()
        assert calls == [2, 2]
        assert snapshot.views_for(2) == 2
        assert snapshot.queries[0].status == QueryStatus.SUCCESS
