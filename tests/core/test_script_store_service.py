from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
from django.db import transaction

from core.caching.script_cache import ScriptCache
from core.script_store.errors import ScriptNotFoundError
from core.script_store.models import LogicScript
from core.script_store.repository import DjangoScriptStore
from core.script_store.service import LogicScriptService
from core.scripting.errors import ScriptCompilationError
from core.time.clock import FixedClock

pytestmark = pytest.mark.django_db(transaction=True)

T0 = datetime(2025, 3, 1, 9, 0, 0, tzinfo=timezone.utc)
TENANT = "dist-acme"
OTHER_TENANT = "dist-globex"

DISCOUNT = "product['unitPrice'] = product['unitPrice'] - 1\nreturn product"
BLOCK = "return {'allow': False, 'message': 'closed'}"


class InvalidationRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, distributor_id):
        self.calls.append(distributor_id)


@pytest.fixture
def recorder():
    return InvalidationRecorder()


@pytest.fixture
def service(recorder):
    return LogicScriptService(invalidate=recorder)


def _create(service, *, tenant=TENANT, trigger="storefront_load", body=DISCOUNT, **kwargs):
    return service.create_script(
        distributor_id=tenant,
        trigger_point=trigger,
        script_content=body,
        **kwargs,
    )


class TestCreate:
    def test_create_persists_and_invalidates(self, service, recorder):
        record = _create(service, description="Loyalty discount")

        row = LogicScript.objects.get(id=uuid.UUID(record.id))
        assert row.distributor_id == TENANT
        assert row.description == "Loyalty discount"
        assert row.active is True
        assert recorder.calls == [TENANT]

    def test_sequence_order_auto_increments_per_trigger(self, service):
        first = _create(service)
        second = _create(service)
        other_trigger = _create(service, trigger="submit", body=BLOCK)
        assert (first.sequence_order, second.sequence_order) == (1, 2)
        assert other_trigger.sequence_order == 1

    def test_explicit_sequence_order(self, service):
        assert _create(service, sequence_order=7).sequence_order == 7

    def test_original_prompt_is_kept(self, service):
        record = _create(service, original_prompt="Give gold customers 10% off")
        assert record.original_prompt == "Give gold customers 10% off"

    def test_rejects_syntax_error(self, service, recorder):
        with pytest.raises(ScriptCompilationError):
            _create(service, body="return (")
        assert LogicScript.objects.count() == 0
        assert recorder.calls == []

    @pytest.mark.parametrize("kwargs", [
        {"trigger": "checkout"},
        {"tenant": "  "},
        {"body": "   "},
        {"sequence_order": "3"},
        {"active": "yes"},
    ])
    def test_rejects_invalid_fields(self, service, kwargs):
        with pytest.raises(ValueError):
            _create(service, **kwargs)


class TestUpdate:
    def test_update_fields_and_invalidate(self, service, recorder):
        record = _create(service)
        updated = service.update_script(
            TENANT, record.id, {"description": "new", "active": False},
        )
        assert updated.description == "new"
        assert updated.active is False
        assert recorder.calls == [TENANT, TENANT]

    def test_set_active(self, service):
        record = _create(service)
        assert service.set_active(TENANT, record.id, False).active is False

    def test_update_checks_syntax_against_new_trigger(self, service):
        record = _create(service, trigger="submit", body=BLOCK)
        updated = service.update_script(
            TENANT, record.id, {"trigger_point": "storefront_load", "script_content": DISCOUNT},
        )
        assert updated.trigger_point == "storefront_load"

    def test_update_rejects_unknown_fields(self, service):
        record = _create(service)
        with pytest.raises(ValueError, match="not updatable"):
            service.update_script(TENANT, record.id, {"distributor_id": OTHER_TENANT})

    def test_update_rejects_bad_script(self, service):
        record = _create(service)
        with pytest.raises(ScriptCompilationError):
            service.update_script(TENANT, record.id, {"script_content": "def ("})
        assert LogicScript.objects.get(id=uuid.UUID(record.id)).script_content == DISCOUNT

    def test_update_other_tenants_script_is_not_found(self, service):
        record = _create(service)
        with pytest.raises(ScriptNotFoundError):
            service.update_script(OTHER_TENANT, record.id, {"active": False})

    def test_update_unknown_id(self, service):
        with pytest.raises(ScriptNotFoundError):
            service.update_script(TENANT, str(uuid.uuid4()), {"active": False})

    def test_update_malformed_id(self, service):
        with pytest.raises(ValueError):
            service.update_script(TENANT, "not-a-uuid", {"active": False})


class TestDelete:
    def test_delete_and_invalidate(self, service, recorder):
        record = _create(service)
        service.delete_script(TENANT, record.id)
        assert LogicScript.objects.count() == 0
        assert recorder.calls == [TENANT, TENANT]

    def test_delete_other_tenants_script_is_not_found(self, service):
        record = _create(service)
        with pytest.raises(ScriptNotFoundError):
            service.delete_script(OTHER_TENANT, record.id)
        assert LogicScript.objects.count() == 1


class TestReorder:
    def test_reorder_applies_all_orders(self, service, recorder):
        a = _create(service)
        b = _create(service)
        records = service.reorder_scripts(TENANT, [
            {"id": a.id, "sequence_order": 2},
            {"id": b.id, "sequence_order": 1},
        ])
        assert [r.id for r in records] == [b.id, a.id]
        assert recorder.calls[-1] == TENANT

    def test_reorder_is_all_or_nothing(self, service, recorder):
        a = _create(service)
        foreign = _create(service, tenant=OTHER_TENANT)
        calls_before = list(recorder.calls)

        with pytest.raises(ScriptNotFoundError):
            service.reorder_scripts(TENANT, [
                {"id": a.id, "sequence_order": 9},
                {"id": foreign.id, "sequence_order": 1},
            ])

        assert LogicScript.objects.get(id=uuid.UUID(a.id)).sequence_order == 1
        assert recorder.calls == calls_before

    @pytest.mark.parametrize("ordering", [
        [],
        {"id": "x"},
        [{"id": "not-a-uuid", "sequence_order": 1}],
        [{"sequence_order": 1}],
    ])
    def test_reorder_rejects_malformed_input(self, service, ordering):
        with pytest.raises(ValueError):
            service.reorder_scripts(TENANT, ordering)


class TestListScripts:
    def test_lists_one_tenant_including_inactive(self, service):
        _create(service)
        _create(service, trigger="submit", body=BLOCK, active=False)
        _create(service, tenant=OTHER_TENANT)

        records = service.list_scripts(TENANT)
        assert [r.trigger_point for r in records] == ["storefront_load", "submit"]
        assert records[1].active is False

    def test_filter_by_trigger_point(self, service):
        _create(service)
        _create(service, trigger="submit", body=BLOCK)
        assert [r.trigger_point for r in service.list_scripts(TENANT, "submit")] == ["submit"]


class TestCacheIntegration:
    def test_write_is_visible_on_next_read(self):
        cache = ScriptCache(DjangoScriptStore(), clock=FixedClock(T0))
        service = LogicScriptService(invalidate=cache.invalidate)

        assert cache.get_scripts(TENANT, "submit") == ()
        record = service.create_script(
            distributor_id=TENANT, trigger_point="submit", script_content=BLOCK,
        )
        assert [s.id for s in cache.get_scripts(TENANT, "submit")] == [record.id]

        service.set_active(TENANT, record.id, False)
        assert cache.get_scripts(TENANT, "submit") == ()

    def test_store_orders_by_sequence(self):
        service = LogicScriptService(invalidate=lambda distributor_id: None)
        late = service.create_script(
            distributor_id=TENANT, trigger_point="submit",
            script_content=BLOCK, sequence_order=5,
        )
        early = service.create_script(
            distributor_id=TENANT, trigger_point="submit",
            script_content=BLOCK, sequence_order=1,
        )
        records = DjangoScriptStore().fetch_active_scripts(TENANT)
        assert [r.id for r in records] == [early.id, late.id]

    def test_eviction_waits_for_outer_commit(self, service, recorder):
        with transaction.atomic():
            _create(service)
            assert recorder.calls == []
        assert recorder.calls == [TENANT]

    def test_rolled_back_write_does_not_evict(self, service, recorder):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                _create(service)
                raise RuntimeError("caller aborts")
        assert recorder.calls == []
        assert LogicScript.objects.count() == 0
