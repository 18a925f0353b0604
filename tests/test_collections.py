# tests/test_collections.py
"""Tests for the in-memory relation aggregates."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from app.domain.collections import (
    HistoryLog,
    PlaylistCollection,
    ReactionCoordinator,
    VideoReferenceSet,
)
from app.domain.entities import HistoryEntry, RelationKind, Video
from app.domain.exceptions import (
    AlreadyPresentError,
    DuplicateNameError,
    DuplicatePresentError,
    InvariantViolation,
    NotFoundError,
    NotInPlaylistError,
    NotInSetError,
    ValidationError,
)


def _video(**fields) -> Video:
    return Video(
        id=uuid4(),
        title="t",
        category="c",
        video_src_url="/media/x.mp4",
        file_path="x.mp4",
        uploaded_by=uuid4(),
        **fields,
    )


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def coordinator(user_id):
    return ReactionCoordinator(
        VideoReferenceSet(user_id, RelationKind.LIKED),
        VideoReferenceSet(user_id, RelationKind.DISLIKED),
    )


class TestVideoReferenceSet:
    def test_add_then_duplicate_rejected(self, user_id):
        ref_set = VideoReferenceSet(user_id, RelationKind.WATCH_LATER)
        vid = uuid4()
        ref_set.add(vid)
        with pytest.raises(AlreadyPresentError, match="already in watch later"):
            ref_set.add(vid)
        assert ref_set.video_ids == [vid]

    def test_remove_absent_rejected(self, user_id):
        ref_set = VideoReferenceSet(user_id, RelationKind.WATCH_LATER)
        with pytest.raises(NotInSetError):
            ref_set.remove(uuid4())

    def test_invariant_errors_share_a_base(self):
        assert issubclass(AlreadyPresentError, InvariantViolation)
        assert issubclass(NotInSetError, InvariantViolation)

    def test_clear_returns_removed(self, user_id):
        ids = [uuid4(), uuid4()]
        ref_set = VideoReferenceSet(user_id, RelationKind.LIKED, list(ids))
        assert ref_set.clear() == ids
        assert len(ref_set) == 0

    def test_discard_reports_presence(self, user_id):
        vid = uuid4()
        ref_set = VideoReferenceSet(user_id, RelationKind.DISLIKED, [vid])
        assert ref_set.discard(vid) is True
        assert ref_set.discard(vid) is False


class TestReactionCoordinator:
    def test_rejects_mismatched_sets(self, user_id):
        with pytest.raises(ValueError):
            ReactionCoordinator(
                VideoReferenceSet(user_id, RelationKind.DISLIKED),
                VideoReferenceSet(user_id, RelationKind.LIKED),
            )
        with pytest.raises(ValueError):
            ReactionCoordinator(
                VideoReferenceSet(user_id, RelationKind.LIKED),
                VideoReferenceSet(uuid4(), RelationKind.DISLIKED),
            )

    def test_like_after_dislike_moves_membership(self, coordinator):
        """Disliked video gets liked: sets stay disjoint and both counters move."""
        video = _video(likes=5, dislikes=3)
        coordinator.add(RelationKind.DISLIKED, video)
        assert video.dislikes == 4

        assert coordinator.toggle(RelationKind.LIKED, video) is True
        assert video.id in coordinator.liked
        assert video.id not in coordinator.disliked
        assert (video.likes, video.dislikes) == (6, 3)

    def test_toggle_twice_restores_state(self, coordinator):
        video = _video(likes=2)
        assert coordinator.toggle(RelationKind.LIKED, video) is True
        assert coordinator.toggle(RelationKind.LIKED, video) is False
        assert video.likes == 2
        assert video.id not in coordinator.liked

    def test_unlike_leaves_disliked_untouched(self, coordinator):
        video = _video()
        other = _video()
        coordinator.add(RelationKind.LIKED, video)
        coordinator.add(RelationKind.DISLIKED, other)
        coordinator.toggle(RelationKind.LIKED, video)
        assert coordinator.disliked.video_ids == [other.id]

    def test_counter_never_goes_negative(self, coordinator):
        video = _video(likes=0)
        coordinator.liked.add(video.id)  # membership without a counted like
        coordinator.toggle(RelationKind.LIKED, video)
        assert video.likes == 0

    def test_sets_stay_disjoint_over_many_toggles(self, coordinator):
        video = _video()
        for kind in [RelationKind.LIKED, RelationKind.DISLIKED, RelationKind.DISLIKED,
                     RelationKind.LIKED, RelationKind.DISLIKED, RelationKind.LIKED]:
            coordinator.toggle(kind, video)
            assert not (set(coordinator.liked.video_ids) & set(coordinator.disliked.video_ids))
            assert video.likes >= 0 and video.dislikes >= 0

    def test_add_duplicate_changes_nothing(self, coordinator):
        video = _video()
        coordinator.add(RelationKind.LIKED, video)
        with pytest.raises(AlreadyPresentError):
            coordinator.add(RelationKind.LIKED, video)
        assert video.likes == 1

    def test_remove_missing_video_still_drops_membership(self, coordinator):
        vid = uuid4()
        coordinator.liked.add(vid)
        coordinator.remove(RelationKind.LIKED, vid, None)
        assert vid not in coordinator.liked

    def test_clear_decrements_surviving_videos(self, coordinator):
        kept = _video(likes=1)
        gone = uuid4()
        coordinator.add(RelationKind.LIKED, kept)
        coordinator.liked.add(gone)
        removed = coordinator.clear(RelationKind.LIKED, {kept.id: kept})
        assert removed == [kept.id, gone]
        assert kept.likes == 1

    def test_counter_deltas_net_out_per_video(self, coordinator):
        video = _video(likes=5, dislikes=3)
        coordinator.add(RelationKind.DISLIKED, video)
        coordinator.toggle(RelationKind.LIKED, video)
        assert coordinator.counter_deltas == {video.id: {"likes": 1, "dislikes": 0}}


class TestPlaylistCollection:
    def test_duplicate_name_is_case_insensitive(self, user_id):
        collection = PlaylistCollection(user_id)
        collection.create("Road Trip")
        with pytest.raises(DuplicateNameError):
            collection.create("road trip")
        assert len(collection) == 1

    def test_name_is_trimmed_and_required(self, user_id):
        collection = PlaylistCollection(user_id)
        assert collection.create("  Chill  ").name == "Chill"
        with pytest.raises(ValidationError):
            collection.create("   ")
        with pytest.raises(ValidationError):
            collection.create(None)

    def test_rename_to_own_name_is_allowed(self, user_id):
        collection = PlaylistCollection(user_id)
        playlist = collection.create("Mix")
        assert collection.update(playlist.id, name="MIX").name == "MIX"

    def test_rename_onto_other_playlist_rejected(self, user_id):
        collection = PlaylistCollection(user_id)
        collection.create("A")
        b = collection.create("B")
        with pytest.raises(DuplicateNameError):
            collection.update(b.id, name=" a ")

    def test_blank_name_on_update_keeps_name(self, user_id):
        collection = PlaylistCollection(user_id)
        playlist = collection.create("Keep", "old")
        updated = collection.update(playlist.id, name="  ", description="new")
        assert (updated.name, updated.description) == ("Keep", "new")

    def test_add_remove_keeps_order_without_duplicates(self, user_id):
        collection = PlaylistCollection(user_id)
        playlist = collection.create("P")
        a, b, c = uuid4(), uuid4(), uuid4()
        for vid in (a, b, c):
            collection.add_video(playlist.id, vid)
        with pytest.raises(DuplicatePresentError):
            collection.add_video(playlist.id, b)
        collection.remove_video(playlist.id, b)
        assert playlist.video_ids == [a, c]
        with pytest.raises(NotInPlaylistError):
            collection.remove_video(playlist.id, b)

    def test_unknown_playlist(self, user_id):
        collection = PlaylistCollection(user_id)
        with pytest.raises(NotFoundError, match="Playlist not found"):
            collection.add_video(uuid4(), uuid4())

    def test_delete_preserves_order_of_rest(self, user_id):
        collection = PlaylistCollection(user_id)
        first, second, third = (collection.create(n) for n in ("1", "2", "3"))
        assert collection.delete(second.id) is second
        assert [p.name for p in collection.playlists] == ["1", "3"]
        assert collection.delete_all() == 2
        assert len(collection) == 0

    def test_membership_flags(self, user_id):
        collection = PlaylistCollection(user_id)
        with_video = collection.create("with")
        collection.create("without")
        vid = uuid4()
        collection.add_video(with_video.id, vid)
        assert [(p.name, flag) for p, flag in collection.membership(vid)] == [
            ("with", True),
            ("without", False),
        ]


class TestHistoryLog:
    def test_rewatch_moves_to_front(self, user_id):
        """Watching v1, v2, v1 leaves [v1, v2] with v1 newest."""
        log = HistoryLog(user_id)
        v1, v2 = uuid4(), uuid4()
        t0 = datetime(2026, 1, 1)
        log.record(v1, t0)
        log.record(v2, t0 + timedelta(seconds=1))
        log.record(v1, t0 + timedelta(seconds=2))
        assert [e.video_id for e in log.ordered()] == [v1, v2]

    def test_cap_drops_oldest(self, user_id):
        log = HistoryLog(user_id)
        t0 = datetime(2026, 1, 1)
        ids = [uuid4() for _ in range(101)]
        for i, vid in enumerate(ids):
            log.record(vid, t0 + timedelta(seconds=i))
        assert len(log) == 100
        assert ids[0] not in {e.video_id for e in log.entries}
        assert log.entries[0].video_id == ids[-1]

    def test_custom_limit(self, user_id):
        log = HistoryLog(user_id, limit=2)
        for _ in range(3):
            log.record(uuid4())
        assert len(log) == 2

    def test_remove_absent_is_silent(self, user_id):
        log = HistoryLog(user_id)
        assert log.remove(uuid4()) == 0

    def test_ordered_sorts_regardless_of_storage(self, user_id):
        t0 = datetime(2026, 1, 1)
        older = HistoryEntry(uuid4(), t0)
        newer = HistoryEntry(uuid4(), t0 + timedelta(hours=1))
        log = HistoryLog(user_id, entries=[older, newer])
        assert log.ordered() == [newer, older]

    def test_clear(self, user_id):
        log = HistoryLog(user_id)
        log.record(uuid4())
        assert log.clear() == 1
        assert log.entries == []
