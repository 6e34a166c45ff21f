"""Tests for status page CRUD and the public projection."""
import asyncio
from datetime import timedelta

import pytest

from pulsewatch.errors import ConflictError, NotFoundError, ValidationError
from pulsewatch.models import CheckResult
from pulsewatch.services.group_service import group_service
from pulsewatch.services.monitor_service import monitor_service
from pulsewatch.services.status_page_service import DEFAULT_PAGE_TITLE, status_page_service
from pulsewatch.utils.clock import utcnow


def _page(**overrides):
    data = {"title": "Production", "slug": "prod", "monitor_ids": []}
    data.update(overrides)
    return data


class TestCrud:
    @pytest.mark.parametrize("slug", ["Prod", "prod page", "prod_1", "", "prød"])
    async def test_slug_pattern(self, db, slug):
        with pytest.raises(ValidationError, match="slug"):
            await status_page_service.create(db, _page(slug=slug))

    async def test_duplicate_slug(self, db):
        await status_page_service.create(db, _page())
        with pytest.raises(ConflictError):
            await status_page_service.create(db, _page(title="Other"))

    async def test_concurrent_creates_with_same_slug(self, db, session_factory):
        async def create_in_own_session():
            async with session_factory() as session:
                return await status_page_service.create(session, _page())

        outcomes = await asyncio.gather(
            create_in_own_session(),
            create_in_own_session(),
            return_exceptions=True,
        )

        successes = [o for o in outcomes if not isinstance(o, Exception)]
        failures = [o for o in outcomes if isinstance(o, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], ConflictError)
        assert [p.slug for p in await status_page_service.list(db)] == ["prod"]

    async def test_unique_violation_maps_to_conflict(self, db, monkeypatch):
        await status_page_service.create(db, _page())

        async def slug_looks_free(*args, **kwargs):
            return None

        # Another process inserted the slug between check and write
        monkeypatch.setattr(status_page_service, "_check_slug_free", slug_looks_free)
        with pytest.raises(ConflictError):
            await status_page_service.create(db, _page(title="Other"))
        other = await status_page_service.create(db, _page(slug="staging"))
        with pytest.raises(ConflictError):
            await status_page_service.update(db, other.id, {"slug": "prod"})
        assert (await status_page_service.get(db, other.id)).slug == "staging"

    async def test_unknown_monitor_ids_rejected(self, db, make_monitor):
        monitor = await make_monitor()
        with pytest.raises(ValidationError, match="Unknown monitor ids: 99"):
            await status_page_service.create(db, _page(monitor_ids=[monitor.id, 99]))
        assert await status_page_service.list(db) == []

    async def test_defaults(self, db):
        page = await status_page_service.create(db, _page())
        assert page.public is True
        assert page.theme == "light"

    async def test_selection_replaced_wholesale(self, db, make_monitor):
        a, b, c = await make_monitor(), await make_monitor(), await make_monitor()
        page = await status_page_service.create(db, _page(monitor_ids=[a.id, b.id]))

        await status_page_service.update(db, page.id, {"monitor_ids": [c.id]})
        assert await status_page_service.monitor_ids(db, page.id) == [c.id]

        await status_page_service.update(db, page.id, {"title": "Renamed"})
        assert await status_page_service.monitor_ids(db, page.id) == [c.id]

    async def test_slug_change_conflict(self, db):
        await status_page_service.create(db, _page())
        other = await status_page_service.create(db, _page(slug="staging"))
        with pytest.raises(ConflictError):
            await status_page_service.update(db, other.id, {"slug": "prod"})
        same = await status_page_service.update(db, other.id, {"slug": "staging", "theme": "dark"})
        assert same.theme == "dark"

    async def test_delete_keeps_monitors(self, db, make_monitor):
        monitor = await make_monitor()
        page = await status_page_service.create(db, _page(monitor_ids=[monitor.id]))
        await status_page_service.delete(db, page.id)
        with pytest.raises(NotFoundError):
            await status_page_service.get(db, page.id)
        assert (await monitor_service.get(db, monitor.id)).id == monitor.id


class TestRender:
    async def test_page_exposes_exactly_its_monitors(self, db, make_monitor):
        one, two = await make_monitor(name="one"), await make_monitor(name="two")
        for _ in range(3):
            await make_monitor()
        await status_page_service.create(db, _page(monitor_ids=[one.id, two.id]))

        rendered = await status_page_service.render(db, "prod")

        assert sorted(m["id"] for m in rendered["monitors"]) == [one.id, two.id]
        assert rendered["config"]["slug"] == "prod"
        assert rendered["title"] == "Production"

    async def test_unknown_slug(self, db):
        with pytest.raises(NotFoundError):
            await status_page_service.render(db, "ghost")

    async def test_private_page_hidden_like_missing(self, db):
        await status_page_service.create(db, _page(slug="internal", public=False))
        with pytest.raises(NotFoundError) as hidden:
            await status_page_service.render(db, "internal")
        with pytest.raises(NotFoundError) as missing:
            await status_page_service.render(db, "nope")
        assert type(hidden.value) is type(missing.value)
        rendered = await status_page_service.render(db, "internal", public_only=False)
        assert rendered["config"]["slug"] == "internal"

    async def test_default_page_has_every_enabled_monitor(self, db, make_monitor):
        shown = await make_monitor()
        await make_monitor(enabled=False)

        rendered = await status_page_service.render(db)

        assert [m["id"] for m in rendered["monitors"]] == [shown.id]
        assert rendered["config"] is None
        assert rendered["title"] == DEFAULT_PAGE_TITLE
        assert rendered["custom_css"] is None

    async def test_empty_default_page_is_operational(self, db):
        rendered = await status_page_service.render(db)
        assert rendered["system_status"] == "operational"
        assert rendered["monitors"] == []
        assert rendered["groups"] == []

    async def test_status_uptime_and_groups(self, db, make_monitor):
        api = await group_service.create(db, "API", order=5)
        dbs = await group_service.create(db, "DB", order=1)
        await group_service.create(db, "Unused", order=0)
        a = await make_monitor(name="gateway", group_id=api.id)
        b = await make_monitor(name="postgres", group_id=dbs.id)
        c = await make_monitor(name="cdn")
        d = await make_monitor(name="mail")
        now = utcnow()
        db.add_all([
            CheckResult(monitor_id=a.id, status="up", created_at=now - timedelta(minutes=5)),
            CheckResult(monitor_id=a.id, status="down", created_at=now - timedelta(minutes=4)),
            CheckResult(monitor_id=b.id, status="up", created_at=now - timedelta(hours=30)),
        ])
        a.last_status = "up"
        b.last_status = "down"
        await db.commit()
        await status_page_service.create(db, _page(monitor_ids=[a.id, b.id, c.id, d.id], custom_css="body{}"))

        rendered = await status_page_service.render(db, "prod")

        assert rendered["system_status"] == "degraded"
        assert [g["name"] for g in rendered["groups"]] == ["DB", "API", "Other Services"]
        assert rendered["groups"][-1]["monitor_ids"] == [c.id, d.id]
        entries = {m["id"]: m for m in rendered["monitors"]}
        assert entries[a.id]["uptime_24h"] == 50.0
        assert entries[a.id]["group_name"] == "API"
        assert entries[b.id]["uptime_24h"] is None
        assert entries[c.id]["last_status"] == "unknown"
        assert entries[c.id]["group_name"] is None
        assert rendered["custom_css"] == "body{}"
