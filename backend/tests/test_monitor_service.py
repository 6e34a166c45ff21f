"""Tests for monitor authoring: create, merge-update, delete."""
from datetime import timedelta

import pytest
from sqlalchemy import select

from pulsewatch.errors import NotFoundError, ValidationError
from pulsewatch.models import CheckResult, Monitor
from pulsewatch.services.channel_service import channel_service
from pulsewatch.services.group_service import group_service
from pulsewatch.services.incident_service import incident_service
from pulsewatch.services.monitor_service import monitor_service
from pulsewatch.services.status_page_service import status_page_service
from pulsewatch.utils.clock import utcnow


class TestCreate:
    async def test_defaults_applied(self, db, make_monitor):
        monitor = await make_monitor()
        assert monitor.interval == 60
        assert monitor.timeout == 10
        assert monitor.max_retries == 0
        assert monitor.enabled is True
        assert monitor.last_status is None
        assert monitor.push_token is None

    async def test_invalid_draft_not_persisted(self, db, make_monitor):
        with pytest.raises(ValidationError):
            await make_monitor(type="http_json", json_path="$.a")
        assert await monitor_service.list(db) == []

    async def test_push_monitors_get_distinct_tokens(self, db, make_monitor):
        first = await make_monitor(type="push")
        second = await make_monitor(type="push")
        assert first.push_token
        assert second.push_token
        assert first.push_token != second.push_token

    async def test_client_cannot_choose_push_token(self, db, make_monitor):
        monitor = await make_monitor(type="push", push_token="mine")
        assert monitor.push_token != "mine"

    async def test_unknown_group_rejected(self, db, make_monitor):
        with pytest.raises(ValidationError, match="Group 42"):
            await make_monitor(group_id=42)


class TestUpdate:
    async def test_merge_keeps_unmentioned_fields(self, db, make_monitor):
        monitor = await make_monitor(interval=120, method="POST")
        updated = await monitor_service.update(db, monitor.id, {"name": "Renamed"})
        assert updated.name == "Renamed"
        assert updated.interval == 120
        assert updated.method == "POST"

    async def test_type_change_keeps_previous_fields_inert(self, db, make_monitor):
        monitor = await make_monitor(type="http_json", json_path="$.status", json_value="ok")
        updated = await monitor_service.update(db, monitor.id, {"type": "tcp", "target": "db:5432"})
        assert updated.type == "tcp"
        assert updated.json_path == "$.status"
        assert updated.json_value == "ok"

    async def test_invalid_merge_leaves_monitor_untouched(self, db, make_monitor):
        monitor = await make_monitor(type="http_json", json_path="$.a", json_value="b")
        with pytest.raises(ValidationError):
            await monitor_service.update(db, monitor.id, {"json_value": None, "interval": 30})
        await db.refresh(monitor)
        assert monitor.json_value == "b"
        assert monitor.interval == 60

    async def test_push_token_never_regenerated(self, db, make_monitor):
        monitor = await make_monitor(type="push")
        token = monitor.push_token
        await monitor_service.update(db, monitor.id, {"type": "http", "target": "https://x.example"})
        back = await monitor_service.update(db, monitor.id, {"type": "push"})
        assert back.push_token == token

    async def test_becoming_push_issues_token(self, db, make_monitor):
        monitor = await make_monitor()
        updated = await monitor_service.update(db, monitor.id, {"type": "push"})
        assert updated.push_token

    async def test_inert_push_token_does_not_resolve(self, db, make_monitor):
        monitor = await make_monitor(type="push")
        token = monitor.push_token
        assert (await monitor_service.get_by_push_token(db, token)).id == monitor.id
        await monitor_service.update(db, monitor.id, {"type": "http", "target": "https://x.example"})
        assert await monitor_service.get_by_push_token(db, token) is None

    async def test_explicit_null_ungroups(self, db, make_monitor):
        group = await group_service.create(db, "Core")
        monitor = await make_monitor(group_id=group.id)
        updated = await monitor_service.update(db, monitor.id, {"group_id": None})
        assert updated.group_id is None

    async def test_null_enabled_keeps_monitor_disabled(self, db, make_monitor):
        monitor = await make_monitor(enabled=False)
        updated = await monitor_service.update(db, monitor.id, {"enabled": None, "name": "Paused"})
        assert updated.enabled is False
        assert updated.name == "Paused"

    async def test_unknown_monitor(self, db):
        with pytest.raises(NotFoundError):
            await monitor_service.update(db, 999, {"name": "x"})


class TestDelete:
    async def test_removes_results_subscriptions_and_page_selections(self, db, make_monitor):
        monitor = await make_monitor()
        keep = await make_monitor()
        db.add(CheckResult(monitor_id=monitor.id, status="up", created_at=utcnow() - timedelta(minutes=1)))
        await db.commit()
        channel = await channel_service.create(db, {"name": "ops", "type": "webhook", "config": '{"url": "https://hook"}'})
        await channel_service.subscribe(db, monitor.id, channel.id)
        page = await status_page_service.create(
            db, {"title": "Prod", "slug": "prod", "monitor_ids": [monitor.id, keep.id]}
        )
        incident = await incident_service.create(db, "Outage", "major", monitor.id)

        await monitor_service.delete(db, monitor.id)

        with pytest.raises(NotFoundError):
            await monitor_service.get(db, monitor.id)
        results = await db.execute(select(CheckResult).where(CheckResult.monitor_id == monitor.id))
        assert results.scalars().all() == []
        assert await status_page_service.monitor_ids(db, page.id) == [keep.id]
        assert (await status_page_service.get(db, page.id)).slug == "prod"
        assert (await channel_service.get(db, channel.id)).name == "ops"
        assert (await incident_service.get(db, incident.id)).monitor_id == monitor.id

    async def test_unknown_monitor(self, db):
        with pytest.raises(NotFoundError):
            await monitor_service.delete(db, 123)


class TestGroups:
    async def test_delete_group_ungroups_members(self, db, make_monitor):
        group = await group_service.create(db, "Databases", order=2)
        a = await make_monitor(group_id=group.id)
        b = await make_monitor(group_id=group.id)

        ungrouped = await group_service.delete(db, group.id)

        assert ungrouped == 2
        for monitor_id in (a.id, b.id):
            monitor = (await db.execute(select(Monitor).where(Monitor.id == monitor_id))).scalar_one()
            await db.refresh(monitor)
            assert monitor.group_id is None
        with pytest.raises(NotFoundError):
            await group_service.get(db, group.id)

    async def test_counts(self, db, make_monitor):
        core = await group_service.create(db, "Core", order=1)
        await group_service.create(db, "Empty", order=2)
        await make_monitor(group_id=core.id)
        counts = [(g.name, n) for g, n in await group_service.list_with_counts(db)]
        assert counts == [("Core", 1), ("Empty", 0)]

    async def test_update_and_validation(self, db):
        group = await group_service.create(db, "Core")
        updated = await group_service.update(db, group.id, {"order": 7})
        assert updated.order == 7
        assert updated.name == "Core"
        with pytest.raises(ValidationError):
            await group_service.update(db, group.id, {"name": "  "})
        with pytest.raises(ValidationError):
            await group_service.create(db, "")
