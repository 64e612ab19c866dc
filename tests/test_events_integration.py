from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from polkarena.api.v1.schemas.events import EventCreate
from polkarena.db import SessionLocal
from polkarena.models import Event, User
from polkarena.services.repositories import SqlEventStore, SqlShortCodeLookup
from polkarena.services.sharing import extract_short_code
from polkarena.services.shortcodes import ALPHABET, LookupOutcome

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer dev_{email}"}


def _future(**delta) -> str:
    return (datetime.now(timezone.utc) + timedelta(**delta)).isoformat()


def _payload(**overrides):
    payload = {
        "name": "Polkadot Builders Night",
        "description": "Lightning talks and pizza",
        "start_time": _future(days=1),
        "end_time": _future(days=1, hours=2, minutes=30),
        "location": "Berlin",
        "tags": "polkadot, ink, ",
    }
    payload.update(overrides)
    return payload


def _create_event(client: TestClient, email: str = "org@example.com", **overrides):
    return client.post("/v1/events", json=_payload(**overrides), headers=_auth_headers(email))


def _count_events() -> int:
    async def _run():
        async with SessionLocal() as session:
            return len((await session.scalars(select(Event))).all())

    return asyncio.run(_run())


def test_create_event_returns_share_link(client: TestClient):
    resp = _create_event(
        client,
        custom_fields=[
            {"id": "1", "name": "Wallet address", "type": "text", "required": True},
            {"id": "2", "name": "Track", "type": "select", "options": ["DeFi", "Infra"]},
        ],
        participant_limit="40",
    )
    assert resp.status_code == 201
    body = resp.json()

    assert body["message"] == "Event created successfully!"
    assert body["detail_url"] == f"/v1/events/{body['id']}"
    assert body["organizer_name"] == "org@example.com"
    assert body["tags"] == ["polkadot", "ink"]
    assert body["participant_limit"] == 40
    assert body["duration"] == "2 hours 30 minutes"
    assert body["short_code_verified"] is True
    assert [f["name"] for f in body["custom_fields"]] == ["Wallet address", "Track"]

    code = body["short_code"]
    assert len(code) == 7
    assert code.startswith("pol")
    assert all(c in ALPHABET for c in code[3:])
    assert body["share_url"] == f"http://testserver/e/{code}"
    assert extract_short_code(body["share_url"]) == code


def test_share_link_redirects_to_event(client: TestClient):
    body = _create_event(client).json()

    resp = client.get(f"/e/{body['short_code']}", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == f"/v1/events/{body['id']}"

    detail = client.get(resp.headers["location"])
    assert detail.status_code == 200
    assert detail.json()["name"] == "Polkadot Builders Night"
    assert detail.json()["share_url"] == body["share_url"]


def test_unknown_share_code_is_404(client: TestClient):
    resp = client.get("/e/zzzzzzz", follow_redirects=False)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "EVENT_NOT_FOUND"


def test_empty_tags_stored_as_null(client: TestClient):
    body = _create_event(client, tags="").json()
    assert body["tags"] is None
    assert body["custom_fields"] is None


def test_end_equal_to_start_rejected_without_write(client: TestClient):
    start = _future(days=2)
    resp = _create_event(client, start_time=start, end_time=start)
    assert resp.status_code == 422
    assert resp.json()["detail"] == {
        "code": "END_BEFORE_START",
        "message": "End time must be after start time",
    }
    assert _count_events() == 0


def test_deadline_not_before_start_rejected(client: TestClient):
    start = _future(days=2)
    resp = _create_event(
        client,
        start_time=start,
        end_time=_future(days=2, hours=2),
        registration_deadline=start,
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "DEADLINE_NOT_BEFORE_START"
    assert _count_events() == 0


def test_missing_required_fields(client: TestClient):
    resp = _create_event(client, description="")
    assert resp.status_code == 422
    assert resp.json()["detail"]["message"] == "Please fill in all required fields"


def test_create_requires_auth(client: TestClient):
    resp = client.post("/v1/events", json=_payload())
    assert resp.status_code == 401


def test_get_missing_event(client: TestClient):
    resp = client.get("/v1/events/00000000-0000-0000-0000-000000000000")
    assert resp.status_code == 404


def test_banner_upload_and_attach(client: TestClient):
    headers = _auth_headers("org@example.com")
    me = client.get("/v1/me", headers=headers).json()

    upload = client.post(
        "/v1/banners",
        files={"file": ("banner.png", PNG, "image/png")},
        headers=headers,
    )
    assert upload.status_code == 201
    banner = upload.json()
    assert banner["path"].startswith(f"{me['user_id']}/")
    assert banner["path"].endswith(".png")
    assert banner["url"] == f"/media/event-banners/{banner['path']}"

    served = client.get(banner["url"])
    assert served.status_code == 200
    assert served.content == PNG

    body = _create_event(client, banner_image_url=banner["path"]).json()
    assert body["banner_image_url"] == banner["path"]
    assert body["banner_url"] == banner["url"]

    removed = client.delete(f"/v1/banners/{banner['path']}", headers=headers)
    assert removed.status_code == 204
    assert client.get(banner["url"]).status_code == 404


def test_banner_rejects_non_images(client: TestClient):
    resp = client.post(
        "/v1/banners",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=_auth_headers("org@example.com"),
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_MIME_TYPE"


def test_cannot_delete_someone_elses_banner(client: TestClient):
    resp = client.delete(
        "/v1/banners/00000000-0000-0000-0000-000000000001/1.png",
        headers=_auth_headers("org@example.com"),
    )
    assert resp.status_code == 403


def test_responses_carry_request_id_and_security_headers(client: TestClient):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["Cache-Control"] == "no-store"


def test_oversized_participant_limit_rejected(client: TestClient):
    resp = _create_event(client, participant_limit="99999999999999999999999")
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_PARTICIPANT_LIMIT"
    assert _count_events() == 0

    # the Integer column maximum itself is accepted
    assert _create_event(client, participant_limit="2147483647").status_code == 201


def test_short_code_lookup_sees_stored_codes(client: TestClient):
    code = _create_event(client).json()["short_code"]

    async def _run():
        async with SessionLocal() as session:
            lookup = SqlShortCodeLookup(session)
            return await lookup(code), await lookup("zzzzzzz")

    assert asyncio.run(_run()) == (LookupOutcome.TAKEN, LookupOutcome.AVAILABLE)


def test_store_rolls_back_on_driver_overflow():
    start = datetime.now(timezone.utc) + timedelta(days=1)
    # skips validation so the oversized value reaches the driver
    record = EventCreate.model_construct(
        name="Overflow",
        description="d",
        start_time=start,
        end_time=start + timedelta(hours=1),
        registration_deadline=None,
        location=None,
        is_online=False,
        participant_limit=10**30,
        tags=None,
        custom_fields=None,
        requirements=None,
        website_url=None,
        discord_url=None,
        twitter_url=None,
        banner_image_url=None,
        short_code="ovrflw2",
    )

    async def _run():
        async with SessionLocal() as session:
            user_id = uuid.uuid4()
            session.add(User(id=user_id, email="store@example.com"))
            await session.commit()

            store = SqlEventStore(session)
            with pytest.raises(OverflowError):
                await store.insert(record, organizer_id=user_id, organizer_name="Store")

            remaining = (await session.scalars(select(Event))).all()
            return remaining, await session.scalar(select(User.email).where(User.id == user_id))

    remaining, email = asyncio.run(_run())
    assert remaining == []
    assert email == "store@example.com"
