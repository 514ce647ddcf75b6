"""Integration tests for API endpoints."""

import pytest


async def create_vendor(client, data) -> dict:
    response = await client.post("/v1/vendor/create", json=data)
    assert response.status_code == 200
    return response.json()


async def create_tour(client, vendor_id, data) -> dict:
    response = await client.post("/v1/tour/create", json={**data, "vendor_id": vendor_id})
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_create_vendor_endpoint(test_client, sample_vendor_data):
    data = await create_vendor(test_client, sample_vendor_data)

    assert data["name"] == sample_vendor_data["name"]
    assert data["commission_rate"] == 15.0
    assert "id" in data


@pytest.mark.asyncio
async def test_create_vendor_duplicate_email(test_client, sample_vendor_data):
    await create_vendor(test_client, sample_vendor_data)

    response = await test_client.post("/v1/vendor/create", json=sample_vendor_data)

    assert response.status_code == 409
    assert response.json()["status"] == 409


@pytest.mark.asyncio
async def test_create_tour_endpoint(test_client, sample_vendor_data, sample_tour_data):
    """Test the tour creation endpoint."""
    vendor = await create_vendor(test_client, sample_vendor_data)

    data = await create_tour(test_client, vendor["id"], sample_tour_data)

    assert data["name"] == sample_tour_data["name"]
    assert data["slug"] == sample_tour_data["slug"]
    assert data["vendor_id"] == vendor["id"]
    assert data["status"] == "pending"
    assert data["ratings"] == {"average": 0.0, "count": 0}
    assert data["blackout_days"] == ["2024-06-15"]
    assert [rt["derived_price"] for rt in data["room_types"]] == [11500, 28750]


@pytest.mark.asyncio
async def test_create_tour_invalid_data(test_client):
    """Test tour creation with invalid data."""
    invalid_data = {
        "vendor_id": "00000000-0000-0000-0000-000000000000",
        "name": "",
        "slug": "test-slug",
        "description": "Test description",
        "availability_window": {"available_from": "2024-06-01", "available_to": "2024-06-30"},
    }

    response = await test_client.post("/v1/tour/create", json=invalid_data)

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == 422
    assert "violations" in data


@pytest.mark.asyncio
async def test_create_tour_negative_net_price(test_client, sample_vendor_data, sample_tour_data):
    vendor = await create_vendor(test_client, sample_vendor_data)
    sample_tour_data["room_types"][0]["net_price"] = -100

    response = await test_client.post(
        "/v1/tour/create", json={**sample_tour_data, "vendor_id": vendor["id"]}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_tour_not_found(test_client):
    response = await test_client.post(
        "/v1/tour/get", json={"tour_id": "00000000-0000-0000-0000-000000000000"}
    )

    assert response.status_code == 404
    data = response.json()
    assert data["resource_type"] == "tour"


@pytest.mark.asyncio
async def test_commission_change_applies_on_next_save(test_client, sample_vendor_data, sample_tour_data):
    vendor = await create_vendor(test_client, sample_vendor_data)
    tour = await create_tour(test_client, vendor["id"], sample_tour_data)

    response = await test_client.post(
        "/v1/vendor/commission", json={"vendor_id": vendor["id"], "commission_rate": 10}
    )
    assert response.status_code == 200
    assert response.json()["commission_rate"] == 10.0

    response = await test_client.post("/v1/tour/get", json={"tour_id": tour["id"]})
    assert [rt["derived_price"] for rt in response.json()["room_types"]] == [11500, 28750]

    response = await test_client.post(
        "/v1/tour/room-types",
        json={"tour_id": tour["id"], "room_types": sample_tour_data["room_types"]},
    )
    assert response.status_code == 200
    assert [rt["derived_price"] for rt in response.json()["room_types"]] == [11000, 27500]


@pytest.mark.asyncio
async def test_availability_lifecycle(test_client, sample_vendor_data, sample_tour_data):
    vendor = await create_vendor(test_client, sample_vendor_data)
    tour = await create_tour(test_client, vendor["id"], sample_tour_data)
    response = await test_client.post(
        "/v1/tour/status", json={"tour_id": tour["id"], "status": "accepted"}
    )
    assert response.json()["status"] == "accepted"

    response = await test_client.post(
        "/v1/availability/create",
        json={
            "tour_id": tour["id"],
            "dates": ["2024-06-10T08:00:00Z", "2024-06-11"],
            "room_types": [{"name": "Double", "net_price": 20000, "adult_occupancy": 2}],
            "discounts": [{"min_users": 5, "discount_percentage": 12.5}],
        },
    )
    assert response.status_code == 200
    items = response.json()["items"]
    assert [item["dates"] for item in items] == [["2024-06-10"], ["2024-06-11"]]
    assert items[0]["room_types"][0]["derived_price"] == 23000

    response = await test_client.post("/v1/tour/get", json={"tour_id": tour["id"]})
    assert response.json()["status"] == "pending"
    assert response.json()["note"] == "new special days added"

    response = await test_client.post(
        "/v1/availability/get",
        json={"availability_id": items[0]["id"], "tour_id": tour["id"]},
    )
    assert response.status_code == 200

    response = await test_client.post("/v1/availability/delete-by-tour", json={"tour_id": tour["id"]})
    assert response.status_code == 200
    assert response.json()["deleted_count"] == 2

    response = await test_client.post("/v1/availability/list", json={"tour_id": tour["id"]})
    assert response.json()["items"] == []

    response = await test_client.post("/v1/availability/delete-by-tour", json={"tour_id": tour["id"]})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_availability_invalid_dates(test_client, sample_vendor_data, sample_tour_data):
    vendor = await create_vendor(test_client, sample_vendor_data)
    tour = await create_tour(test_client, vendor["id"], sample_tour_data)

    response = await test_client.post(
        "/v1/availability/create",
        json={
            "tour_id": tour["id"],
            "dates": ["2024-06-10", "2024-06-15", "2024-07-01"],
            "room_types": [{"name": "Double", "net_price": 20000}],
        },
    )

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "INVALID_DATE_RANGE"
    assert data["offending_dates"] == ["2024-06-15", "2024-07-01"]

    response = await test_client.post("/v1/availability/list", json={"tour_id": tour["id"]})
    assert response.json()["items"] == []


@pytest.mark.asyncio
async def test_review_requires_auth(test_client):
    response = await test_client.post(
        "/v1/review/create",
        json={"tour_id": "00000000-0000-0000-0000-000000000000", "rating": 5, "comment": "Nice"},
    )

    assert response.status_code == 401
    data = response.json()
    assert data["status"] == 401
    assert "authorization" in data["title"].lower()


@pytest.mark.asyncio
async def test_review_rejects_bad_token(test_client):
    response = await test_client.post(
        "/v1/review/create",
        json={"tour_id": "00000000-0000-0000-0000-000000000000", "rating": 5, "comment": "Nice"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_review_flow(test_client, auth_headers, sample_vendor_data, sample_tour_data):
    vendor = await create_vendor(test_client, sample_vendor_data)
    tour = await create_tour(test_client, vendor["id"], sample_tour_data)

    ids = {}
    for user_id, rating in [("alice", 5), ("bob", 4), ("carol", 3)]:
        response = await test_client.post(
            "/v1/review/create",
            json={"tour_id": tour["id"], "rating": rating, "comment": "Lovely"},
            headers=auth_headers(user_id),
        )
        assert response.status_code == 200
        assert response.json()["vendor_id"] == vendor["id"]
        ids[user_id] = response.json()["id"]

    response = await test_client.post("/v1/tour/get", json={"tour_id": tour["id"]})
    assert response.json()["ratings"] == {"average": 4.0, "count": 3}

    response = await test_client.post(
        "/v1/review/create",
        json={"tour_id": tour["id"], "rating": 1, "comment": "Again"},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_REVIEW"

    response = await test_client.post(
        "/v1/review/update",
        json={"review_id": ids["carol"], "rating": 5},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 403

    response = await test_client.post(
        "/v1/review/delete",
        json={"review_id": ids["carol"]},
        headers=auth_headers("carol"),
    )
    assert response.status_code == 200

    response = await test_client.post("/v1/tour/get", json={"tour_id": tour["id"]})
    assert response.json()["ratings"] == {"average": 4.5, "count": 2}

    response = await test_client.post("/v1/review/list", json={"tour_id": tour["id"]})
    assert {item["user_id"] for item in response.json()["items"]} == {"alice", "bob"}


@pytest.mark.asyncio
async def test_review_rating_out_of_range(test_client, auth_headers):
    response = await test_client.post(
        "/v1/review/create",
        json={"tour_id": "00000000-0000-0000-0000-000000000000", "rating": 6, "comment": "Wow"},
        headers=auth_headers(),
    )

    assert response.status_code == 422
