"""
Item 라우트 테스트

MockStorage 기반 LedgerStore를 주입하여 HTTP 계층만 검증.
"""

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from adapters.mock.storage import MockStorage
from core.config.loader import Settings
from core.ledger import Item, LedgerStore, encode_items
from web.app import create_app


@pytest.fixture
def client(storage: MockStorage) -> Iterator[TestClient]:
    """lifespan이 실행된 TestClient"""
    app = create_app(LedgerStore(storage))
    with TestClient(app) as test_client:
        yield test_client


def add(client: TestClient, name: str, price: object) -> dict:
    response = client.post("/api/items", json={"name": name, "price": price})
    assert response.status_code == 201
    return response.json()


class TestHealth:
    """GET /health"""

    def test_ok(self, client: TestClient) -> None:
        """정상 상태"""
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["degraded"] is False
        assert body["item_count"] == 0
        assert body["pending_writes"] == 0

    def test_degraded(self) -> None:
        """로드 실패 시 degraded (앱은 계속 동작)"""
        app = create_app(LedgerStore(MockStorage(fail_reads=True)))

        with TestClient(app) as client:
            body = client.get("/health").json()

            assert body["status"] == "degraded"
            assert body["degraded"] is True
            assert client.post("/api/items", json={"name": "A", "price": 1}).status_code == 201


class TestItemRoutes:
    """/api/items 테스트"""

    def test_list_loaded_items(self) -> None:
        """시작 시 저장된 아이템 로드"""
        stored = [Item(id="a", name="Book A", price=500, count=3)]
        app = create_app(LedgerStore(MockStorage(initial=encode_items(stored))))

        with TestClient(app) as client:
            body = client.get("/api/items").json()

        assert body["items"] == [
            {"id": "a", "name": "Book A", "price": 500, "count": 3, "revenue": 1500}
        ]
        assert body["total_revenue"] == 1500

    def test_add(self, client: TestClient, storage: MockStorage) -> None:
        """추가 → 201 + 영속"""
        body = add(client, "Book A", "500")

        assert body["item"]["name"] == "Book A"
        assert body["item"]["price"] == 500
        assert body["item"]["count"] == 0
        assert body["changed"] is True
        assert body["persisted"] is True
        assert body["warning"] is None
        assert storage.data is not None

    @pytest.mark.parametrize(
        ("payload", "field"),
        [
            ({"name": "", "price": 100}, "name"),
            ({"name": "   ", "price": 100}, "name"),
            ({"name": "Book", "price": -1}, "price"),
            ({"name": "Book", "price": "abc"}, "price"),
        ],
    )
    def test_add_invalid(self, client: TestClient, payload: dict, field: str) -> None:
        """검증 실패 → 422 + field"""
        response = client.post("/api/items", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == field
        assert client.get("/api/items").json()["items"] == []

    def test_get_and_update(self, client: TestClient) -> None:
        """조회/수정 (판매 수 유지)"""
        item_id = add(client, "Book A", 500)["item"]["id"]
        client.post(f"/api/items/{item_id}/increment")

        response = client.put(f"/api/items/{item_id}", json={"name": "Novel", "price": 700})

        assert response.status_code == 200
        assert response.json()["item"]["count"] == 1
        assert client.get(f"/api/items/{item_id}").json()["name"] == "Novel"

    def test_revenue_scenario(self, client: TestClient) -> None:
        """Book A ×3, Book B 감소(no-op) → 1500"""
        a = add(client, "Book A", 500)["item"]["id"]
        b = add(client, "Book B", 300)["item"]["id"]

        for _ in range(3):
            client.post(f"/api/items/{a}/increment")
        response = client.post(f"/api/items/{b}/decrement")

        assert response.json()["changed"] is False
        assert response.json()["item"]["count"] == 0
        assert response.json()["total_revenue"] == 1500
        assert client.get("/api/revenue").json() == {"total_revenue": 1500, "item_count": 2}

    def test_delete_then_not_found(self, client: TestClient) -> None:
        """삭제 후 같은 ID → 404"""
        item_id = add(client, "Book A", 500)["item"]["id"]

        assert client.delete(f"/api/items/{item_id}").status_code == 200

        assert client.get(f"/api/items/{item_id}").status_code == 404
        assert client.post(f"/api/items/{item_id}/increment").status_code == 404
        assert client.post(f"/api/items/{item_id}/decrement").status_code == 404
        assert client.delete(f"/api/items/{item_id}").status_code == 404
        assert client.put(
            f"/api/items/{item_id}", json={"name": "A", "price": 1}
        ).status_code == 404

    def test_write_failure_is_warning(self, client: TestClient, storage: MockStorage) -> None:
        """영속 실패 → 200 + warning, 메모리 상태 유지"""
        item_id = add(client, "Book A", 500)["item"]["id"]
        storage.fail_next_writes(2)

        response = client.post(f"/api/items/{item_id}/increment")

        assert response.status_code == 200
        body = response.json()
        assert body["persisted"] is False
        assert body["warning"] is not None
        assert body["item"]["count"] == 1


class TestDefaultApp:
    """settings 기반 SQLite 앱"""

    def test_persists_across_restart(self, temp_settings_file: Path) -> None:
        """앱 재시작 후 상태 유지"""
        Settings(temp_settings_file)

        with TestClient(create_app()) as client:
            item_id = add(client, "Book A", 500)["item"]["id"]
            client.post(f"/api/items/{item_id}/increment")

        with TestClient(create_app()) as client:
            body = client.get("/api/items").json()

        assert body["items"][0]["id"] == item_id
        assert body["items"][0]["count"] == 1
        assert body["total_revenue"] == 500
