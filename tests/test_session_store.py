import json
import pytest
from valorant_dashboard.models.session import SessionData, now_ms
from valorant_dashboard.models.stored_session import StoredSession


def _session(**overrides):
    fields = dict(
        access_token="access",
        entitlements_token="entitlements",
        puuid="puuid-1",
        region="eu",
        riot_cookies="ssid=s1",
        created_at=now_ms(),
    )
    fields.update(overrides)
    return SessionData(**fields)


@pytest.mark.asyncio
async def test_save_and_get(store):
    data = _session(game_name="Player", tag_line="EUW")
    await store.save("sid-1", data, 3600)

    loaded = await store.get("sid-1")
    assert loaded is not None
    assert loaded.puuid == "puuid-1"
    assert loaded.game_name == "Player"
    assert loaded.created_at == data.created_at


@pytest.mark.asyncio
async def test_persisted_payload_uses_camel_case(store, test_db):
    await store.save("sid-1", _session(), 3600)

    row = await test_db.get(StoredSession, "sid-1")
    payload = json.loads(row.data)
    assert payload["accessToken"] == "access"
    assert payload["riotCookies"] == "ssid=s1"
    assert "access_token" not in payload


@pytest.mark.asyncio
async def test_save_overwrites(store):
    await store.save("sid-1", _session(region="eu"), 3600)
    await store.save("sid-1", _session(region="kr"), 3600)

    assert (await store.get("sid-1")).region == "kr"
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_get_missing(store):
    assert await store.get("nope") is None


@pytest.mark.asyncio
async def test_expired_row_is_deleted_on_read(store, test_db):
    await store.save("sid-1", _session(), 3600)
    row = await test_db.get(StoredSession, "sid-1")
    row.expires_at = now_ms() - 1
    await test_db.commit()

    assert await store.get("sid-1") is None
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_invalid_payload_reads_as_missing(store, test_db):
    test_db.add(StoredSession(id="sid-bad", data="{not json", expires_at=now_ms() + 60000))
    await test_db.commit()

    assert await store.get("sid-bad") is None


@pytest.mark.asyncio
async def test_delete(store):
    await store.save("sid-1", _session(), 3600)
    await store.delete("sid-1")
    await store.delete("sid-1")

    assert await store.get("sid-1") is None


@pytest.mark.asyncio
async def test_cleanup_expired(store, test_db):
    await store.save("live", _session(), 3600)
    test_db.add(StoredSession(id="old-1", data="{}", expires_at=now_ms() - 1000))
    test_db.add(StoredSession(id="old-2", data="{}", expires_at=now_ms() - 5000))
    await test_db.commit()

    assert await store.cleanup_expired() == 2
    assert await store.count() == 1
    assert await store.get("live") is not None


@pytest.mark.asyncio
async def test_migrate_from_json(store, tmp_path):
    legacy = tmp_path / "sessions.json"
    legacy.write_text(json.dumps([
        {"id": "keep", "data": _session().to_payload(), "expiresAt": now_ms() + 60000},
        {"id": "stale", "data": _session().to_payload(), "expiresAt": now_ms() - 60000},
    ]))

    assert await store.migrate_from_json(legacy) == 1
    assert (await store.get("keep")).puuid == "puuid-1"
    assert await store.get("stale") is None
    assert not legacy.exists()
    assert (tmp_path / "sessions.json.migrated").exists()


@pytest.mark.asyncio
async def test_migrate_skips_populated_table(store, tmp_path):
    await store.save("existing", _session(), 3600)
    legacy = tmp_path / "sessions.json"
    legacy.write_text(json.dumps([
        {"id": "keep", "data": _session().to_payload(), "expiresAt": now_ms() + 60000},
    ]))

    assert await store.migrate_from_json(legacy) == 0
    assert legacy.exists()


@pytest.mark.asyncio
async def test_migrate_malformed_file(store, tmp_path):
    legacy = tmp_path / "sessions.json"
    legacy.write_text("{broken")

    assert await store.migrate_from_json(legacy) == 0
    assert legacy.exists()


@pytest.mark.asyncio
async def test_migrate_missing_file(store, tmp_path):
    assert await store.migrate_from_json(tmp_path / "absent.json") == 0
