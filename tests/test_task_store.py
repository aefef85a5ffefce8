"""TaskStore 单元测试

测试内容：
1. 创建：插入到最前面、ID 唯一、标题校验
2. 编辑：位置/完成状态/创建时间不变，截止时间变化时清零提醒标记
3. 删除与完成状态切换
4. 拖拽排序的位置语义
5. 每次变更都持久化并广播；写入失败时保留内存状态
"""

from datetime import timedelta

import pytest
from taskdeck.exceptions import NotFoundError, PersistenceError, ValidationError
from taskdeck.hub import ChangeHub
from taskdeck.models import Category, ChangeType, Priority, ReminderKind, TaskInput
from taskdeck.store.task_store import TaskStore

from .fakes import FakeClock, MemoryGateway


async def _seed(store: TaskStore, *titles: str) -> list[str]:
    """按顺序创建任务，返回最终集合顺序的 ID 列表（最后创建的在最前面）"""
    for title in titles:
        await store.create({"title": title})
    return [t.id for t in store.snapshot()]


class TestCreate:
    """创建任务"""

    async def test_new_task_is_prepended(self, store: TaskStore):
        first = await store.create({"title": "First"})
        second = await store.create({"title": "Second"})

        ids = [t.id for t in store.snapshot()]
        assert ids == [second.id, first.id]

    async def test_ids_are_unique(self, store: TaskStore):
        for i in range(20):
            await store.create({"title": f"Task {i}"})
        ids = [t.id for t in store.snapshot()]
        assert len(set(ids)) == 20

    async def test_ids_follow_creation_order(self, store: TaskStore):
        """同一毫秒内创建的任务，ID 仍按生成顺序递增"""
        created = [(await store.create({"title": f"Task {i}"})).id for i in range(20)]
        assert created == sorted(created)
        assert len(set(created)) == 20

    async def test_ids_increase_when_clock_goes_back(self, store: TaskStore, clock: FakeClock):
        first = await store.create({"title": "first"})
        clock.advance(timedelta(minutes=-5))
        second = await store.create({"title": "second"})
        assert second.id > first.id

    async def test_fields_and_defaults(self, store: TaskStore, clock: FakeClock):
        due = clock.now() + timedelta(days=1)
        task = await store.create(
            TaskInput(
                title="Buy milk",
                description="2 litres",
                category=Category.SHOPPING,
                priority=Priority.LOW,
                due_date=due,
            )
        )
        assert task.title == "Buy milk"
        assert task.description == "2 litres"
        assert task.category == Category.SHOPPING
        assert task.priority == Priority.LOW
        assert task.due_date == due
        assert task.completed is False
        assert task.created_at == clock.now()
        assert task.notified_due_soon is False
        assert task.notified_overdue is False

    async def test_camel_case_mapping_input(self, store: TaskStore):
        task = await store.create(
            {"title": "Gym", "category": "health", "dueDate": "2026-01-03T18:00:00Z"}
        )
        assert task.category == Category.HEALTH
        assert task.due_date is not None

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    async def test_empty_title_rejected(self, store: TaskStore, gateway: MemoryGateway, title):
        with pytest.raises(ValidationError) as exc_info:
            await store.create({"title": title})
        assert exc_info.value.field == "title"
        assert len(store) == 0
        assert gateway.save_count == 0

    async def test_invalid_category_rejected(self, store: TaskStore):
        with pytest.raises(ValidationError):
            await store.create({"title": "x", "category": "garden"})

    async def test_missing_title_rejected(self, store: TaskStore):
        with pytest.raises(ValidationError):
            await store.create({"description": "no title"})


class TestUpdate:
    """编辑任务"""

    async def test_preserves_identity_position_and_completion(
        self, store: TaskStore, clock: FakeClock
    ):
        ids = await _seed(store, "A", "B", "C")
        target = ids[1]
        await store.toggle_complete(target)
        original = store.get(target)

        clock.advance(timedelta(hours=3))
        updated = await store.update(
            target,
            {"title": "B2", "description": "new", "category": "work", "priority": "high"},
        )

        assert [t.id for t in store.snapshot()] == ids
        assert updated.id == original.id
        assert updated.created_at == original.created_at
        assert updated.completed is True
        assert updated.title == "B2"
        assert updated.category == Category.WORK
        assert updated.priority == Priority.HIGH

    async def test_due_date_change_resets_flags(self, store: TaskStore, clock: FakeClock):
        task = await store.create({"title": "x", "dueDate": clock.now() - timedelta(hours=1)})
        await store.mark_notified(task.id, ReminderKind.DUE_SOON)
        await store.mark_notified(task.id, ReminderKind.OVERDUE)

        updated = await store.update(
            task.id, {"title": "x", "dueDate": clock.now() + timedelta(days=2)}
        )

        assert updated.notified_due_soon is False
        assert updated.notified_overdue is False

    async def test_same_due_date_keeps_flags(self, store: TaskStore, clock: FakeClock):
        due = clock.now() - timedelta(hours=1)
        task = await store.create({"title": "x", "dueDate": due})
        await store.mark_notified(task.id, ReminderKind.OVERDUE)

        updated = await store.update(task.id, {"title": "renamed", "dueDate": due})

        assert updated.notified_overdue is True

    async def test_clearing_due_date_resets_flags(self, store: TaskStore, clock: FakeClock):
        task = await store.create({"title": "x", "dueDate": clock.now() - timedelta(hours=1)})
        await store.mark_notified(task.id, ReminderKind.OVERDUE)

        updated = await store.update(task.id, {"title": "x"})

        assert updated.due_date is None
        assert updated.notified_overdue is False

    async def test_unknown_id(self, store: TaskStore):
        with pytest.raises(NotFoundError) as exc_info:
            await store.update("missing", {"title": "x"})
        assert exc_info.value.task_id == "missing"

    async def test_empty_title(self, store: TaskStore):
        task = await store.create({"title": "x"})
        with pytest.raises(ValidationError):
            await store.update(task.id, {"title": "  "})
        assert store.get(task.id).title == "x"


class TestDeleteAndToggle:
    """删除与完成状态切换"""

    async def test_delete_removes_exactly_one(self, store: TaskStore):
        ids = await _seed(store, "A", "B", "C")
        await store.delete(ids[1])
        assert [t.id for t in store.snapshot()] == [ids[0], ids[2]]

    async def test_delete_twice_is_not_found(self, store: TaskStore):
        task = await store.create({"title": "x"})
        await store.delete(task.id)
        with pytest.raises(NotFoundError):
            await store.delete(task.id)

    async def test_toggle_flips_completed(self, store: TaskStore):
        task = await store.create({"title": "x"})
        assert (await store.toggle_complete(task.id)).completed is True
        assert (await store.toggle_complete(task.id)).completed is False

    async def test_toggle_unknown_id(self, store: TaskStore):
        with pytest.raises(NotFoundError):
            await store.toggle_complete("missing")

    async def test_mark_notified_unknown_id(self, store: TaskStore):
        with pytest.raises(NotFoundError):
            await store.mark_notified("missing", ReminderKind.OVERDUE)

    async def test_get_unknown_id(self, store: TaskStore):
        with pytest.raises(NotFoundError):
            store.get("missing")


class TestMarkNotified:
    """提醒标记置位"""

    async def test_sets_flag(self, store: TaskStore, clock: FakeClock):
        due = clock.now() - timedelta(hours=1)
        task = await store.create({"title": "x", "dueDate": due})

        assert await store.mark_notified(task.id, ReminderKind.OVERDUE, expected_due=due) is True
        assert store.get(task.id).notified_overdue is True

    async def test_rescheduled_task_is_not_flagged(
        self, store: TaskStore, gateway: MemoryGateway, clock: FakeClock
    ):
        """截止时间已被修改：不置位、不写入"""
        due = clock.now() - timedelta(hours=1)
        task = await store.create({"title": "x", "dueDate": due})
        await store.update(task.id, {"title": "x", "dueDate": clock.now() + timedelta(days=1)})
        saves = gateway.save_count

        assert await store.mark_notified(task.id, ReminderKind.OVERDUE, expected_due=due) is False
        assert store.get(task.id).notified_overdue is False
        assert gateway.save_count == saves

    async def test_completed_task_is_not_flagged(self, store: TaskStore, clock: FakeClock):
        due = clock.now() - timedelta(hours=1)
        task = await store.create({"title": "x", "dueDate": due})
        await store.toggle_complete(task.id)

        assert await store.mark_notified(task.id, ReminderKind.OVERDUE, expected_due=due) is False
        assert store.get(task.id).notified_overdue is False


class TestReorder:
    """拖拽排序"""

    async def test_move_last_onto_first(self, store: TaskStore):
        """[A,B,C] 中把 C 拖到 A 上 -> [C,A,B]"""
        a, b, c = await _seed(store, "C", "B", "A")
        assert [t.title for t in store.snapshot()] == ["A", "B", "C"]

        assert await store.reorder(c, a) is True

        assert [t.title for t in store.snapshot()] == ["C", "A", "B"]

    async def test_move_forward_shifts_left(self, store: TaskStore):
        """source 在 target 之前：中间的任务前移一位"""
        ids = await _seed(store, "D", "C", "B", "A")
        a, b, c, d = ids

        await store.reorder(a, c)

        assert [t.id for t in store.snapshot()] == [b, c, a, d]

    async def test_adjacent_moves(self, store: TaskStore):
        a, b = await _seed(store, "B", "A")
        await store.reorder(a, b)
        assert [t.id for t in store.snapshot()] == [b, a]
        await store.reorder(a, b)
        assert [t.id for t in store.snapshot()] == [a, b]

    async def test_reorder_back_restores_relative_order(self, store: TaskStore):
        """reorder(a,b) 后 reorder(b,a) 恢复 a 与 b 的相对顺序，但不是交换"""
        a, b, c, d = await _seed(store, "D", "C", "B", "A")

        await store.reorder(a, c)
        await store.reorder(c, a)

        order = [t.id for t in store.snapshot()]
        assert order.index(a) < order.index(c)
        assert order == [b, a, c, d]

    async def test_same_id_is_noop(self, store: TaskStore, gateway: MemoryGateway):
        (a,) = await _seed(store, "A")
        saves = gateway.save_count
        assert await store.reorder(a, a) is False
        assert gateway.save_count == saves

    async def test_unknown_ids_are_ignored(self, store: TaskStore, gateway: MemoryGateway):
        ids = await _seed(store, "B", "A")
        saves = gateway.save_count

        assert await store.reorder("missing", ids[0]) is False
        assert await store.reorder(ids[0], "missing") is False

        assert [t.id for t in store.snapshot()] == ids
        assert gateway.save_count == saves


class TestSnapshot:
    """快照只读"""

    async def test_modifying_snapshot_does_not_affect_store(self, store: TaskStore):
        task = await store.create({"title": "original"})
        snap = store.snapshot()
        snap[0].title = "hacked"
        assert store.get(task.id).title == "original"

    async def test_returned_task_is_a_copy(self, store: TaskStore):
        task = await store.create({"title": "original"})
        task.completed = True
        assert store.get(task.id).completed is False


class TestPersistence:
    """变更持久化"""

    async def test_every_mutation_saves(self, store: TaskStore, gateway: MemoryGateway):
        a = await store.create({"title": "A"})
        b = await store.create({"title": "B"})
        await store.update(a.id, {"title": "A2"})
        await store.toggle_complete(a.id)
        await store.reorder(a.id, b.id)
        await store.mark_notified(a.id, ReminderKind.DUE_SOON)
        await store.delete(b.id)

        assert gateway.save_count == 7
        assert gateway.stored_ids() == [a.id]

    async def test_reopen_restores_collection(
        self, store: TaskStore, gateway: MemoryGateway, clock: FakeClock
    ):
        ids = await _seed(store, "A", "B", "C")
        reopened = await TaskStore.open(gateway, clock=clock)
        assert [t.id for t in reopened.snapshot()] == ids

    async def test_save_failure_keeps_memory_state(
        self, store: TaskStore, gateway: MemoryGateway
    ):
        """写入失败：内存变更保留、标记 dirty、抛出 PersistenceError"""
        kept = await store.create({"title": "kept"})
        gateway.fail_saves = True

        with pytest.raises(PersistenceError):
            await store.create({"title": "unsaved"})

        assert store.dirty is True
        assert [t.title for t in store.snapshot()] == ["unsaved", "kept"]
        assert gateway.stored_ids() == [kept.id]

    async def test_next_mutation_retries_write(self, store: TaskStore, gateway: MemoryGateway):
        gateway.fail_saves = True
        with pytest.raises(PersistenceError):
            await store.create({"title": "first"})

        gateway.fail_saves = False
        await store.create({"title": "second"})

        assert store.dirty is False
        assert len(gateway.stored_ids()) == 2

    async def test_flush_retries_write(self, store: TaskStore, gateway: MemoryGateway):
        gateway.fail_saves = True
        with pytest.raises(PersistenceError):
            await store.create({"title": "first"})

        gateway.fail_saves = False
        await store.flush()

        assert store.dirty is False
        assert len(gateway.stored_ids()) == 1

    async def test_foreign_errors_are_wrapped(self, clock: FakeClock):
        class BrokenGateway(MemoryGateway):
            async def save(self, tasks):
                raise OSError("disk full")

        store = await TaskStore.open(BrokenGateway(), clock=clock)
        with pytest.raises(PersistenceError) as exc_info:
            await store.create({"title": "x"})
        assert isinstance(exc_info.value.original_error, OSError)


class TestChangeNotifications:
    """变更广播"""

    async def test_mutations_are_broadcast(self, store: TaskStore, hub: ChangeHub):
        queue = hub.subscribe()

        task = await store.create({"title": "x"})
        await store.toggle_complete(task.id)

        created = queue.get_nowait()
        toggled = queue.get_nowait()
        assert created.type == ChangeType.CREATED
        assert created.task_id == task.id
        assert [t.id for t in created.tasks] == [task.id]
        assert toggled.type == ChangeType.TOGGLED
        assert toggled.tasks[0].completed is True

    async def test_failed_save_still_broadcasts(
        self, store: TaskStore, hub: ChangeHub, gateway: MemoryGateway
    ):
        queue = hub.subscribe()
        gateway.fail_saves = True

        with pytest.raises(PersistenceError):
            await store.create({"title": "x"})

        assert queue.get_nowait().type == ChangeType.CREATED

    async def test_rejected_input_is_not_broadcast(self, store: TaskStore, hub: ChangeHub):
        queue = hub.subscribe()
        with pytest.raises(ValidationError):
            await store.create({"title": ""})
        assert queue.empty()

    async def test_unsubscribe(self, store: TaskStore, hub: ChangeHub):
        queue = hub.subscribe()
        hub.unsubscribe(queue)
        await store.create({"title": "x"})
        assert queue.empty()
        assert hub.subscriber_count == 0

    async def test_full_queue_is_dropped(self):
        hub = ChangeHub(queue_maxsize=1)
        store = TaskStore(MemoryGateway(), hub=hub)
        hub.subscribe()

        await store.create({"title": "a"})
        await store.create({"title": "b"})

        assert hub.subscriber_count == 0
