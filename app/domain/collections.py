"""User-video relation collections and the invariants that govern them.

These are plain in-memory aggregates.  Services load one from its repository,
apply a single mutation here (which either succeeds completely or raises a
domain error before touching anything), persist the result and commit.

Invariants kept by this module:
  - a relation set never holds the same video twice;
  - a user's liked and disliked sets are disjoint, and the video's
    ``likes``/``dislikes`` counters move with membership, never below zero;
  - playlist names are unique per user, compared case-insensitively;
  - a playlist never holds the same video twice;
  - the history log holds at most one entry per video and at most
    ``HISTORY_LIMIT`` entries, newest first.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from app.domain.entities import HistoryEntry, Playlist, RelationKind, Video
from app.domain.exceptions import (
    AlreadyPresentError,
    DuplicateNameError,
    DuplicatePresentError,
    NotFoundError,
    NotInPlaylistError,
    NotInSetError,
    ValidationError,
)

HISTORY_LIMIT = 100

RELATION_LABELS = {
    RelationKind.LIKED: "liked videos",
    RelationKind.DISLIKED: "disliked videos",
    RelationKind.WATCH_LATER: "watch later",
}

REACTION_KINDS = (RelationKind.LIKED, RelationKind.DISLIKED)

_COUNTER_FIELDS = {
    RelationKind.LIKED: "likes",
    RelationKind.DISLIKED: "dislikes",
}

_OPPOSITE = {
    RelationKind.LIKED: RelationKind.DISLIKED,
    RelationKind.DISLIKED: RelationKind.LIKED,
}


# ---------------------------------------------------------------------------
# Video Reference Set
# ---------------------------------------------------------------------------
@dataclass
class VideoReferenceSet:
    """Deduplicated set of video ids for one user and one relation kind.

    ``video_ids`` keeps insertion order for display only; membership is what
    matters.
    """

    user_id: UUID
    kind: RelationKind
    video_ids: list[UUID] = field(default_factory=list)

    @property
    def label(self) -> str:
        return RELATION_LABELS[self.kind]

    def __contains__(self, video_id: UUID) -> bool:
        return video_id in self.video_ids

    def __len__(self) -> int:
        return len(self.video_ids)

    def add(self, video_id: UUID) -> None:
        if video_id in self.video_ids:
            raise AlreadyPresentError(f"Video is already in {self.label}")
        self.video_ids.append(video_id)

    def remove(self, video_id: UUID) -> None:
        if video_id not in self.video_ids:
            raise NotInSetError(f"Video is not in {self.label}")
        self.video_ids.remove(video_id)

    def discard(self, video_id: UUID) -> bool:
        """Remove if present; return whether anything was removed."""
        if video_id in self.video_ids:
            self.video_ids.remove(video_id)
            return True
        return False

    def clear(self) -> list[UUID]:
        removed = self.video_ids
        self.video_ids = []
        return removed


# ---------------------------------------------------------------------------
# Mutual Exclusion Coordinator
# ---------------------------------------------------------------------------
class ReactionCoordinator:
    """Keeps one user's liked and disliked sets disjoint.

    Every membership change is mirrored on the video's aggregate counter and
    recorded in :attr:`counter_deltas`.  Callers persist the deltas rather
    than the counters themselves, since other users may have moved the same
    counters since the video was loaded.
    """

    def __init__(self, liked: VideoReferenceSet, disliked: VideoReferenceSet):
        if liked.kind is not RelationKind.LIKED or disliked.kind is not RelationKind.DISLIKED:
            raise ValueError("ReactionCoordinator needs the liked and disliked sets")
        if liked.user_id != disliked.user_id:
            raise ValueError("Liked and disliked sets belong to different users")
        self._sets = {RelationKind.LIKED: liked, RelationKind.DISLIKED: disliked}
        self.counter_deltas: dict[UUID, dict[str, int]] = {}

    def _bump(self, video: Video, kind: RelationKind, delta: int) -> None:
        name = _COUNTER_FIELDS[kind]
        setattr(video, name, max(0, getattr(video, name) + delta))
        deltas = self.counter_deltas.setdefault(video.id, {"likes": 0, "dislikes": 0})
        deltas[name] += delta

    @property
    def liked(self) -> VideoReferenceSet:
        return self._sets[RelationKind.LIKED]

    @property
    def disliked(self) -> VideoReferenceSet:
        return self._sets[RelationKind.DISLIKED]

    def add(self, kind: RelationKind, video: Video) -> None:
        """Add *video* to *kind*, evicting it from the opposite set if needed."""
        self._sets[kind].add(video.id)
        self._bump(video, kind, +1)
        opposite = _OPPOSITE[kind]
        if self._sets[opposite].discard(video.id):
            self._bump(video, opposite, -1)

    def remove(self, kind: RelationKind, video_id: UUID, video: Optional[Video]) -> None:
        """Remove membership; *video* may be ``None`` when it no longer exists."""
        self._sets[kind].remove(video_id)
        if video is not None:
            self._bump(video, kind, -1)

    def toggle(self, kind: RelationKind, video: Video) -> bool:
        """Flip membership of *video* in *kind*. Returns the new membership.

        The removal path never touches the opposite set.
        """
        if video.id in self._sets[kind]:
            self.remove(kind, video.id, video)
            return False
        self.add(kind, video)
        return True

    def clear(self, kind: RelationKind, videos: dict[UUID, Video]) -> list[UUID]:
        """Empty *kind* and decrement the counter of every video still around."""
        removed = self._sets[kind].clear()
        for video_id in removed:
            video = videos.get(video_id)
            if video is not None:
                self._bump(video, kind, -1)
        return removed


# ---------------------------------------------------------------------------
# Playlist Collection
# ---------------------------------------------------------------------------
@dataclass
class PlaylistCollection:
    """Ordered playlists owned by one user."""

    user_id: UUID
    playlists: list[Playlist] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.playlists)

    def get(self, playlist_id: UUID) -> Playlist:
        for playlist in self.playlists:
            if playlist.id == playlist_id:
                return playlist
        raise NotFoundError("Playlist not found")

    def _name_taken(self, name: str, exclude_id: Optional[UUID] = None) -> bool:
        folded = name.casefold()
        return any(
            p.name.strip().casefold() == folded and p.id != exclude_id for p in self.playlists
        )

    def create(self, name: Optional[str], description: Optional[str] = None) -> Playlist:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Playlist name is required")
        if self._name_taken(cleaned):
            raise DuplicateNameError("A playlist with this name already exists")
        playlist = Playlist(
            id=uuid4(),
            user_id=self.user_id,
            name=cleaned,
            description=description or "",
        )
        self.playlists.append(playlist)
        return playlist

    def update(
        self,
        playlist_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Playlist:
        """Rename and/or re-describe. A blank name means "leave the name alone"."""
        playlist = self.get(playlist_id)
        cleaned = (name or "").strip()
        if cleaned:
            if self._name_taken(cleaned, exclude_id=playlist.id):
                raise DuplicateNameError("A playlist with this name already exists")
            playlist.name = cleaned
        if description is not None:
            playlist.description = description
        playlist.updated_at = datetime.utcnow()
        return playlist

    def add_video(self, playlist_id: UUID, video_id: UUID) -> Playlist:
        playlist = self.get(playlist_id)
        if video_id in playlist.video_ids:
            raise DuplicatePresentError("Video is already in this playlist")
        playlist.video_ids.append(video_id)
        playlist.updated_at = datetime.utcnow()
        return playlist

    def remove_video(self, playlist_id: UUID, video_id: UUID) -> Playlist:
        playlist = self.get(playlist_id)
        if video_id not in playlist.video_ids:
            raise NotInPlaylistError("Video is not in this playlist")
        playlist.video_ids = [v for v in playlist.video_ids if v != video_id]
        playlist.updated_at = datetime.utcnow()
        return playlist

    def delete(self, playlist_id: UUID) -> Playlist:
        playlist = self.get(playlist_id)
        self.playlists = [p for p in self.playlists if p.id != playlist_id]
        return playlist

    def delete_all(self) -> int:
        count = len(self.playlists)
        self.playlists = []
        return count

    def membership(self, video_id: UUID) -> list[tuple[Playlist, bool]]:
        """Every playlist paired with whether it contains *video_id*."""
        return [(p, video_id in p.video_ids) for p in self.playlists]


# ---------------------------------------------------------------------------
# Bounded History Log
# ---------------------------------------------------------------------------
@dataclass
class HistoryLog:
    """Newest-first watch history, one entry per video, capped at ``limit``."""

    user_id: UUID
    entries: list[HistoryEntry] = field(default_factory=list)
    limit: int = HISTORY_LIMIT

    def __len__(self) -> int:
        return len(self.entries)

    def record(self, video_id: UUID, watched_at: Optional[datetime] = None) -> HistoryEntry:
        """Move *video_id* to the front; the oldest entries past the cap are dropped."""
        self.entries = [e for e in self.entries if e.video_id != video_id]
        entry = HistoryEntry(video_id=video_id, watched_at=watched_at or datetime.utcnow())
        self.entries.insert(0, entry)
        del self.entries[self.limit:]
        return entry

    def remove(self, video_id: UUID) -> int:
        """Drop every entry for *video_id*. Absence is not an error."""
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.video_id != video_id]
        return before - len(self.entries)

    def clear(self) -> int:
        count = len(self.entries)
        self.entries = []
        return count

    def ordered(self) -> list[HistoryEntry]:
        # Storage order is not trusted; equal timestamps keep their stored order.
        return sorted(self.entries, key=lambda e: e.watched_at, reverse=True)
