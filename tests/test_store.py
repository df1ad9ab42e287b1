"""Tests for AttachmentStore."""

import logging

import pytest

from attachflow.store import AttachmentStore
from attachflow.types import Attachment, MediaBlob, Preview


def _blobs(count: int, media_type: str = "image/png") -> list[MediaBlob]:
    return [MediaBlob(data=f"payload-{index}".encode(), media_type=media_type) for index in range(count)]


def test_append_creates_queued_placeholders() -> None:
    store = AttachmentStore(capacity=5)
    accepted = store.append(_blobs(2))
    assert len(accepted) == 2
    assert all(item.status == "queued" for item in accepted)
    assert all(item.preview is None for item in accepted)
    assert store.snapshot() == accepted


def test_append_guesses_kind_from_declared_type() -> None:
    store = AttachmentStore(capacity=5)
    image, video, other, unknown = store.append(
        [
            MediaBlob(data=b"1", media_type="image/png"),
            MediaBlob(data=b"2", media_type="video/mp4"),
            MediaBlob(data=b"3", media_type="application/pdf"),
            MediaBlob(data=b"4"),
        ]
    )
    assert (image.kind, video.kind, other.kind, unknown.kind) == ("image", "video", "file", "file")


def test_append_truncates_to_capacity() -> None:
    store = AttachmentStore(capacity=5)
    assert len(store.append(_blobs(3))) == 3
    assert len(store.append(_blobs(4))) == 2
    assert len(store.append(_blobs(1))) == 0
    assert len(store) == 5
    assert store.remaining == 0


def test_capacity_never_exceeded_across_appends_and_removals() -> None:
    store = AttachmentStore(capacity=3)
    for round_size in (2, 5, 1, 4):
        store.append(_blobs(round_size))
        assert len(store) <= store.capacity
        first = store.snapshot()[0]
        store.remove(first.id)
    assert len(store) <= store.capacity


def test_append_drops_overflow_instead_of_queueing_it() -> None:
    store = AttachmentStore(capacity=1)
    store.append(_blobs(3))
    (only,) = store.snapshot()
    store.remove(only.id)
    assert len(store) == 0


def test_append_logs_dropped_count(caplog: pytest.LogCaptureFixture) -> None:
    store = AttachmentStore(capacity=1)
    with caplog.at_level(logging.DEBUG, logger="attachflow.store"):
        store.append(_blobs(3))
    assert "dropped 2 of 3" in caplog.text


def test_ids_are_unique_and_not_reused() -> None:
    store = AttachmentStore(capacity=2)
    seen: set[str] = set()
    for _ in range(5):
        (item,) = store.append(_blobs(1))
        assert item.id not in seen
        seen.add(item.id)
        store.remove(item.id)


def test_negative_capacity_rejected() -> None:
    with pytest.raises(ValueError, match="capacity"):
        AttachmentStore(capacity=-1)


def test_update_applies_partial_change() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    updated = store.update(item.id, caption="hello")
    assert updated is not None
    assert updated.caption == "hello"
    assert updated.status == "queued"
    assert store.get(item.id) == updated


def test_update_missing_id_is_noop() -> None:
    store = AttachmentStore(capacity=5)
    assert store.update("missing", caption="x") is None
    assert len(store) == 0


def test_update_rejects_unknown_or_identity_fields() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    with pytest.raises(TypeError, match="id"):
        store.update(item.id, id="other")
    with pytest.raises(TypeError, match="blob"):
        store.update(item.id, blob=MediaBlob(data=b"x"))


def test_transition_moves_forward_only() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    assert store.transition(item.id, "reading") is not None
    assert store.transition(item.id, "queued") is None
    assert store.transition(item.id, "reading") is None
    preview = Preview(uri="data:image/png;base64,AA", media_type="image/png")
    uploading = store.transition(item.id, "uploading", preview=preview)
    assert uploading is not None
    assert uploading.preview == preview
    assert store.transition(item.id, "done") is not None
    assert store.transition(item.id, "failed") is None
    current = store.get(item.id)
    assert current is not None
    assert current.status == "done"


def test_transition_allows_reading_straight_to_done() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    store.transition(item.id, "reading")
    done = store.transition(item.id, "done", preview=None, error="bad")
    assert done is not None
    assert done.error == "bad"


def test_failed_is_terminal() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    store.transition(item.id, "reading")
    store.transition(item.id, "uploading")
    assert store.transition(item.id, "failed", error="boom") is not None
    assert store.transition(item.id, "done") is None


def test_transition_missing_id_is_noop() -> None:
    store = AttachmentStore(capacity=5)
    assert store.transition("gone", "reading") is None


def test_remove_returns_attachment_once() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    removed = store.remove(item.id)
    assert removed is not None
    assert removed.id == item.id
    assert store.remove(item.id) is None
    assert item.id not in store


def test_update_after_remove_does_not_resurrect() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    store.remove(item.id)
    assert store.update(item.id, status="done") is None
    assert store.transition(item.id, "reading") is None
    assert store.snapshot() == ()


def test_clear_returns_everything_in_order() -> None:
    store = AttachmentStore(capacity=5)
    accepted = store.append(_blobs(3))
    assert store.clear() == accepted
    assert len(store) == 0
    assert store.clear() == ()


def test_mutations_on_one_id_leave_others_untouched() -> None:
    store = AttachmentStore(capacity=5)
    first, second = store.append(_blobs(2))
    store.transition(second.id, "reading")
    store.set_caption(first.id, "first caption")
    after = store.get(second.id)
    assert after is not None
    assert after.status == "reading"
    assert after.caption == ""


def test_toggle_caption_edit() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    toggled = store.toggle_caption_edit(item.id)
    assert toggled is not None
    assert toggled.editing_caption is True
    toggled_back = store.toggle_caption_edit(item.id)
    assert toggled_back is not None
    assert toggled_back.editing_caption is False
    assert store.toggle_caption_edit("missing") is None


def test_set_caption_requires_string() -> None:
    store = AttachmentStore(capacity=5)
    (item,) = store.append(_blobs(1))
    with pytest.raises(TypeError, match="caption"):
        store.set_caption(item.id, 3)  # type: ignore[arg-type]
    assert store.set_caption("missing", "x") is None


def test_iteration_and_membership() -> None:
    store = AttachmentStore(capacity=5)
    accepted = store.append(_blobs(2))
    assert tuple(store) == accepted
    assert accepted[0].id in store
    assert "nope" not in store


def test_subscribe_receives_snapshots() -> None:
    store = AttachmentStore(capacity=5)
    seen: list[tuple[Attachment, ...]] = []
    unsubscribe = store.subscribe(seen.append)

    (item,) = store.append(_blobs(1))
    store.set_caption(item.id, "x")
    store.set_caption(item.id, "x")
    store.remove(item.id)
    unsubscribe()
    store.append(_blobs(1))

    assert [len(snapshot) for snapshot in seen] == [1, 1, 0]
    assert seen[1][0].caption == "x"


def test_noop_mutations_do_not_notify() -> None:
    store = AttachmentStore(capacity=0)
    seen: list[tuple[Attachment, ...]] = []
    store.subscribe(seen.append)
    store.append(_blobs(2))
    store.update("missing", caption="x")
    store.remove("missing")
    store.clear()
    assert seen == []


def test_failing_listener_does_not_break_mutation(caplog: pytest.LogCaptureFixture) -> None:
    store = AttachmentStore(capacity=5)
    seen: list[int] = []

    def _broken(_: tuple[Attachment, ...]) -> None:
        msg = "renderer crashed"
        raise RuntimeError(msg)

    store.subscribe(_broken)
    store.subscribe(lambda snapshot: seen.append(len(snapshot)))
    with caplog.at_level(logging.ERROR, logger="attachflow.store"):
        accepted = store.append(_blobs(1))

    assert len(accepted) == 1
    assert seen == [1]
    assert "listener" in caplog.text


def test_unsubscribe_twice_is_safe() -> None:
    store = AttachmentStore(capacity=5)
    unsubscribe = store.subscribe(lambda _: None)
    unsubscribe()
    unsubscribe()
