"""Tests for the menu catalog routes."""

from armaso_pos.models.menu import MenuItem


class TestMenuListing:
    def test_list_all_sorted_by_name(self, auth_client, menu_items):
        res = auth_client.get("/api/v1/menu/items")
        assert res.status_code == 200
        names = [i["name"] for i in res.json()]
        assert names == sorted(names)
        assert len(names) == 4

    def test_filter_by_category(self, auth_client, menu_items):
        res = auth_client.get("/api/v1/menu/items", params={"category": "FOOD"})
        assert res.status_code == 200
        assert {i["name"] for i in res.json()} == {"Nasi Goreng Spesial", "Sate Ayam"}

    def test_unknown_category_rejected(self, auth_client, menu_items):
        res = auth_client.get("/api/v1/menu/items", params={"category": "DESSERT"})
        assert res.status_code == 422

    def test_active_only(self, auth_client, menu_items):
        res = auth_client.get("/api/v1/menu/items/active")
        assert res.status_code == 200
        names = {i["name"] for i in res.json()}
        assert "Paket Hemat A" not in names
        assert len(names) == 3


class TestMenuEditing:
    def test_create(self, auth_client, db_session):
        res = auth_client.post("/api/v1/menu/items", json={
            "name": "Kopi Susu",
            "price": 15000,
            "category": "DRINK",
        })
        assert res.status_code == 201
        data = res.json()
        assert data["price"] == 15000
        assert data["is_active"] is True
        assert db_session.get(MenuItem, data["id"]) is not None

    def test_negative_price_rejected(self, auth_client):
        res = auth_client.post("/api/v1/menu/items", json={
            "name": "Gratis",
            "price": -1,
            "category": "FOOD",
        })
        assert res.status_code == 422

    def test_update(self, auth_client, menu_items):
        item = menu_items["teh"]
        res = auth_client.put(f"/api/v1/menu/items/{item.id}", json={
            "name": "Es Teh Jumbo",
            "price": 7000,
            "category": "DRINK",
        })
        assert res.status_code == 200
        assert res.json()["name"] == "Es Teh Jumbo"
        assert res.json()["price"] == 7000

    def test_update_missing_item(self, auth_client):
        res = auth_client.put("/api/v1/menu/items/999", json={
            "name": "X", "price": 1, "category": "FOOD",
        })
        assert res.status_code == 404

    def test_toggle_active(self, auth_client, menu_items):
        item = menu_items["paket"]
        res = auth_client.patch(f"/api/v1/menu/items/{item.id}/active", json={"is_active": True})
        assert res.status_code == 200
        assert res.json()["is_active"] is True

    def test_delete_unsold_item(self, auth_client, db_session, menu_items):
        item_id = menu_items["sate"].id
        res = auth_client.delete(f"/api/v1/menu/items/{item_id}")
        assert res.status_code == 200
        assert res.json() == {"success": True}
        db_session.expire_all()
        assert db_session.get(MenuItem, item_id) is None

    def test_delete_sold_item_conflicts(self, auth_client, menu_items, make_order):
        make_order([(menu_items["nasi"], 1)])
        res = auth_client.delete(f"/api/v1/menu/items/{menu_items['nasi'].id}")
        assert res.status_code == 409

    def test_delete_missing_item(self, auth_client):
        assert auth_client.delete("/api/v1/menu/items/999").status_code == 404
