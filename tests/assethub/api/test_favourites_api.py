"""Route tests driving the full application against an in-memory database."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator
from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from assethub.db.connection import Database
from assethub.db.models import Favourite
from assethub.db.repositories import FavouriteRepository
from assethub.db.seed import SEED_ASSETS, SEED_USER_IDS, seed_dev_once
from assethub.main import create_app
from assethub.services.favourites_service import FavouritesService
from assethub.settings import AppSettings
from tests.assethub.support import count_favourites

USER_ID = SEED_USER_IDS[0]
OTHER_USER_ID = SEED_USER_IDS[1]
ASSET_IDS = [row["id"] for row in SEED_ASSETS]


@pytest_asyncio.fixture
async def client(database: Database) -> AsyncIterator[AsyncClient]:
    async with database.session() as session:
        await seed_dev_once(session)

    app = create_app(settings=AppSettings(_env_file=None), database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


def _favourites_url(user_id: uuid.UUID = USER_ID) -> str:
    return f"/api/users/{user_id}/favourites"


async def _add(client: AsyncClient, asset_id: uuid.UUID, user_id: uuid.UUID = USER_ID):
    return await client.post(_favourites_url(user_id), json={"asset_id": str(asset_id)})


@pytest.mark.asyncio
async def test_healthz(client: AsyncClient) -> None:
    response = await client.get("/api/healthz")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_inbound_request_id_is_echoed(client: AsyncClient) -> None:
    response = await client.get(
        f"/api/users/{uuid.uuid4()}", headers={"X-Request-ID": "trace-42"}
    )

    assert response.headers["X-Request-ID"] == "trace-42"
    assert response.json()["request_id"] == "trace-42"


@pytest.mark.asyncio
async def test_get_user(client: AsyncClient) -> None:
    found = await client.get(f"/api/users/{USER_ID}")
    missing = await client.get(f"/api/users/{uuid.uuid4()}")

    assert found.status_code == 200
    assert found.json()["id"] == str(USER_ID)
    assert missing.status_code == 404
    assert missing.json()["error_type"] == "not_found"
    assert missing.json()["message"] == "user not found"


@pytest.mark.asyncio
async def test_add_favourite_returns_created_relation(client: AsyncClient) -> None:
    response = await _add(client, ASSET_IDS[0])

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == str(USER_ID)
    assert body["asset_id"] == str(ASSET_IDS[0])
    assert datetime.fromisoformat(body["created_at"].replace("Z", "+00:00")).tzinfo
    assert "id" not in body


@pytest.mark.asyncio
async def test_add_duplicate_is_conflict(client: AsyncClient) -> None:
    await _add(client, ASSET_IDS[0])

    response = await _add(client, ASSET_IDS[0])

    assert response.status_code == 409
    assert response.json()["error_type"] == "conflict"
    assert response.json()["message"] == "favourite already exists"


@pytest.mark.asyncio
async def test_add_unknown_asset_is_not_found(client: AsyncClient) -> None:
    response = await _add(client, uuid.uuid4())
    listing = await client.get(_favourites_url())

    assert response.status_code == 404
    assert response.json()["message"] == "asset not found"
    assert listing.json()["items"] == []


@pytest.mark.asyncio
async def test_add_for_unknown_user_is_not_found(client: AsyncClient) -> None:
    response = await _add(client, ASSET_IDS[0], user_id=uuid.uuid4())

    assert response.status_code == 404
    assert response.json()["message"] == "user not found"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{}, {"asset_id": "not-a-uuid"}, {"asset_id": str(ASSET_IDS[0]), "note": "x"}],
    ids=["missing", "malformed", "extra-field"],
)
async def test_add_rejects_invalid_body(client: AsyncClient, body: dict) -> None:
    response = await client.post(_favourites_url(), json=body)

    assert response.status_code == 422
    assert response.json()["error_type"] == "validation_error"


@pytest.mark.asyncio
async def test_keyset_listing_pages_through_favourites(
    client: AsyncClient, ticking_clock: list[datetime]
) -> None:
    for asset_id in ASSET_IDS[:3]:
        assert (await _add(client, asset_id)).status_code == 201

    first = await client.get(_favourites_url(), params={"limit": 2})
    assert first.status_code == 200
    first_body = first.json()
    assert [item["id"] for item in first_body["items"]] == [str(a) for a in ASSET_IDS[:2]]
    assert first_body["next_after"]

    second = await client.get(
        _favourites_url(), params={"limit": 2, "after": first_body["next_after"]}
    )
    second_body = second.json()
    assert [item["id"] for item in second_body["items"]] == [str(ASSET_IDS[2])]
    assert second_body["next_after"] is None


@pytest.mark.asyncio
async def test_listing_items_carry_asset_fields(
    client: AsyncClient, ticking_clock: list[datetime]
) -> None:
    await _add(client, ASSET_IDS[4])

    item = (await client.get(_favourites_url())).json()["items"][0]

    assert item["type"] == "audience"
    assert item["description"] == SEED_ASSETS[4]["description"]
    assert item["payload"]["gender"] == "Male"


@pytest.mark.asyncio
async def test_zero_limit_uses_default(
    client: AsyncClient, ticking_clock: list[datetime]
) -> None:
    for asset_id in ASSET_IDS:
        await _add(client, asset_id)

    body = (await client.get(_favourites_url(), params={"limit": 0})).json()

    assert len(body["items"]) == len(ASSET_IDS)
    assert body["next_after"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("limit", ["-1", "ten"])
async def test_invalid_limit_is_rejected(client: AsyncClient, limit: str) -> None:
    response = await client.get(_favourites_url(), params={"limit": limit})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_bad_cursor_is_invalid_input(client: AsyncClient) -> None:
    response = await client.get(_favourites_url(), params={"after": "not-valid-base64"})

    assert response.status_code == 400
    assert response.json()["error_type"] == "invalid_input"


@pytest.mark.asyncio
async def test_listing_unknown_user_is_not_found(client: AsyncClient) -> None:
    response = await client.get(_favourites_url(uuid.uuid4()))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_malformed_user_id_is_validation_error(client: AsyncClient) -> None:
    response = await client.get("/api/users/not-a-uuid/favourites")

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_offset_listing_is_newest_first(
    client: AsyncClient, ticking_clock: list[datetime]
) -> None:
    for asset_id in ASSET_IDS[:3]:
        await _add(client, asset_id)

    response = await client.get(f"{_favourites_url()}/offset", params={"limit": 2})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [
        str(ASSET_IDS[2]),
        str(ASSET_IDS[1]),
    ]
    assert "next_after" not in response.json()


@pytest.mark.asyncio
async def test_remove_favourite_is_not_idempotent(client: AsyncClient) -> None:
    await _add(client, ASSET_IDS[1])

    first = await client.delete(f"{_favourites_url()}/{ASSET_IDS[1]}")
    second = await client.delete(f"{_favourites_url()}/{ASSET_IDS[1]}")

    assert first.status_code == 204
    assert first.content == b""
    assert second.status_code == 404
    assert second.json()["message"] == "favourite not found"


@pytest.mark.asyncio
async def test_favourites_are_isolated_per_user(client: AsyncClient) -> None:
    await _add(client, ASSET_IDS[0], user_id=OTHER_USER_ID)

    mine = (await client.get(_favourites_url())).json()
    theirs = (await client.get(_favourites_url(OTHER_USER_ID))).json()

    assert mine["items"] == []
    assert [item["id"] for item in theirs["items"]] == [str(ASSET_IDS[0])]


@pytest.mark.asyncio
async def test_edit_asset_description(client: AsyncClient) -> None:
    url = f"/api/assets/{ASSET_IDS[2]}/description"

    updated = await client.patch(url, json={"description": "  Heavy social usage, Q3  "})
    blank = await client.patch(url, json={"description": "   "})
    missing = await client.patch(
        f"/api/assets/{uuid.uuid4()}/description", json={"description": "x"}
    )

    assert updated.status_code == 200
    assert updated.json()["description"] == "Heavy social usage, Q3"
    assert updated.json()["type"] == "insight"
    assert blank.status_code == 400
    assert blank.json()["error_type"] == "invalid_input"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_request_deadline_rolls_back_slow_write(
    client: AsyncClient, database: Database, monkeypatch: pytest.MonkeyPatch
) -> None:
    original_create = FavouriteRepository.create

    async def slow_create(self: FavouriteRepository, favourite: Favourite) -> Favourite:
        created = await original_create(self, favourite)
        await asyncio.sleep(0.5)
        return created

    monkeypatch.setattr(FavouriteRepository, "create", slow_create)
    app = create_app(
        settings=AppSettings(_env_file=None, REQUEST_TIMEOUT_SECONDS=0.1),
        database=database,
    )

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as slow:
        response = await _add(slow, ASSET_IDS[0])

    assert response.status_code == 504
    assert response.json()["error_type"] == "timeout_error"
    assert response.headers["X-Request-ID"]
    async with database.session() as session:
        assert await count_favourites(session) == 0
    listing = await client.get(_favourites_url())
    assert listing.json()["items"] == []


@pytest.mark.asyncio
async def test_unmodelled_constraint_violation_is_internal_error(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def failing_add(self: FavouritesService, **kwargs: uuid.UUID) -> Favourite:
        raise IntegrityError(
            "INSERT INTO favourites", {}, Exception("FOREIGN KEY constraint failed")
        )

    monkeypatch.setattr(FavouritesService, "add", failing_add)

    response = await _add(client, ASSET_IDS[0])

    assert response.status_code == 500
    assert response.json()["error_type"] == "database_error"
