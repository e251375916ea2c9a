"""Container Routes — HTTP mapping for registration, override and shipping."""

from yard.core.domain_types import YardEvent


async def test_create_container_with_defaults(client):
    res = await client.post("/api/v1/containers", json={})
    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "new"
    assert body["zone_id"] is None
    assert body["type"] == "type 1"
    assert body["number"].startswith("C-")


async def test_create_container_with_fields(client):
    res = await client.post(
        "/api/v1/containers", json={"number": "MSCU1", "type": "reefer"},
    )
    assert res.status_code == 201
    assert res.json()["number"] == "MSCU1"
    assert res.json()["type"] == "reefer"


async def test_create_container_as_assigned_rejected(client):
    res = await client.post("/api/v1/containers", json={"status": "assigned"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_TRANSITION"


async def test_create_publishes_container_added(client, broadcaster):
    async with broadcaster.subscribe() as queue:
        res = await client.post("/api/v1/containers", json={"number": "EV-1"})
        message = queue.get_nowait()
    assert message["type"] == YardEvent.CONTAINER_ADDED.value
    assert message["data"]["id"] == res.json()["id"]


async def test_list_containers_with_filter(client, make_container):
    await make_container(status="new", number="a")
    await make_container(status="shipped", number="b")

    all_res = await client.get("/api/v1/containers")
    shipped_res = await client.get("/api/v1/containers", params={"status": "shipped"})

    assert [c["number"] for c in all_res.json()] == ["a", "b"]
    assert [c["number"] for c in shipped_res.json()] == ["b"]


async def test_get_missing_container_is_404(client):
    res = await client.get("/api/v1/containers/999")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "CONTAINER_NOT_FOUND"


async def test_patch_status_is_raw_override(client, make_zone, make_container, fetch_zone):
    zone = await make_zone(capacity=1, current_load=1)
    container = await make_container(status="assigned", zone_id=zone.id)

    res = await client.patch(
        f"/api/v1/containers/{container.id}", json={"status": "shipped"},
    )

    assert res.status_code == 200
    assert res.json()["status"] == "shipped"
    assert res.json()["zone_id"] == zone.id
    assert (await fetch_zone(zone.id)).current_load == 1


async def test_patch_unknown_status_is_validation_error(client, make_container):
    container = await make_container()
    res = await client.patch(
        f"/api/v1/containers/{container.id}", json={"status": "lost"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_patch_missing_container_is_404(client):
    res = await client.patch("/api/v1/containers/77", json={"status": "new"})
    assert res.status_code == 404


async def test_ship_container_twice(client, make_zone, make_container, fetch_zone):
    zone = await make_zone(capacity=2, current_load=1)
    container = await make_container(status="assigned", zone_id=zone.id)

    first = await client.post(f"/api/v1/containers/{container.id}/ship")
    second = await client.post(f"/api/v1/containers/{container.id}/ship")

    assert first.status_code == 200
    assert first.json()["already_shipped"] is False
    assert first.json()["released_zone_id"] == zone.id
    assert first.json()["container"]["status"] == "shipped"
    assert second.status_code == 200
    assert second.json()["already_shipped"] is True
    assert (await fetch_zone(zone.id)).current_load == 0


async def test_ship_missing_container_is_404(client):
    res = await client.post("/api/v1/containers/31337/ship")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "CONTAINER_NOT_FOUND"
