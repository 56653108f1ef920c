"""Playback Coordinator - owns one guild's queue and its voice connection."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...domain.music.entities import PlaybackQueue, QueueEntry, QueueLimits
from ...domain.music.value_objects import EnqueueOutcome, PlaybackState, SkipVoteTally
from ...domain.shared.events import (
    EventBus,
    QueueExhausted,
    TrackPlaybackFailed,
    TrackStartedPlaying,
    get_event_bus,
)
from ...domain.shared.exceptions import (
    AudioSourceUnresolvableError,
    InvalidOperationError,
    VoiceTransportError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import ChannelIdField, DiscordSnowflake
from .queue_models import BatchEnqueueResult, QueueSnapshot

if TYPE_CHECKING:
    from datetime import datetime

    from ...domain.music.repository import TrackCatalog
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)


class PlaybackCoordinator:
    """Lifecycle state machine wrapping a ``PlaybackQueue`` and the voice transport.

    All public methods run on the event loop. Awaiting the transport is the
    only suspension point, so each method re-checks state after it resumes.
    A second ``connect`` issued while one is pending awaits the first.
    """

    def __init__(
        self,
        *,
        guild_id: DiscordSnowflake,
        voice_adapter: VoiceAdapter,
        catalog: TrackCatalog | None = None,
        limits: QueueLimits | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._guild_id = guild_id
        self._voice_adapter = voice_adapter
        self._catalog = catalog
        self._event_bus = event_bus or get_event_bus()
        self._queue = PlaybackQueue(guild_id=guild_id, limits=limits or QueueLimits())

        self._state = PlaybackState.DISCONNECTED
        self._channel_id: ChannelIdField | None = None
        self._connect_task: asyncio.Task[bool] | None = None
        self._last_finished: QueueEntry | None = None

    # ── Read side ───────────────────────────────────────────────────

    @property
    def guild_id(self) -> DiscordSnowflake:
        return self._guild_id

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def channel_id(self) -> ChannelIdField | None:
        return self._channel_id

    @property
    def queue(self) -> PlaybackQueue:
        return self._queue

    @property
    def current(self) -> QueueEntry | None:
        return self._queue.current

    @property
    def last_activity(self) -> datetime:
        return self._queue.last_activity

    @property
    def is_connected(self) -> bool:
        return self._state.is_connected

    def snapshot(self) -> QueueSnapshot:
        return QueueSnapshot(
            guild_id=self._guild_id,
            state=self._state,
            current=self._queue.current,
            upcoming=self._queue.upcoming,
            loop_enabled=self._queue.loop_enabled,
            skip_votes=len(self._queue.skip_votes),
            skip_votes_required=self._queue.limits.skip_votes_required,
        )

    # ── Connection ──────────────────────────────────────────────────

    async def connect(self, channel_id: ChannelIdField) -> bool:
        """Join ``channel_id``; concurrent callers share one attempt.

        A reconnect started by ``handle_transport_error`` counts as a pending
        attempt too. Once it settles the coordinator moves to ``channel_id``
        if that differs from the channel it recovered into.
        """
        while self._connect_task is not None and not self._connect_task.done():
            logger.debug(LogTemplates.COORDINATOR_CONNECT_JOINING, self._guild_id)
            joined = await asyncio.shield(self._connect_task)
            if not joined or self._channel_id == channel_id:
                return joined

        if self._state.is_connected:
            if self._channel_id == channel_id:
                return True
            # Already joined elsewhere in this guild; the transport moves us.
            self._channel_id = channel_id
            self._connect_task = asyncio.create_task(
                self._attempt_connect(channel_id, retry=True)
            )
        else:
            self._channel_id = channel_id
            self._set_state(PlaybackState.CONNECTING)
            self._connect_task = asyncio.create_task(self._run_connect(channel_id))
        return await asyncio.shield(self._connect_task)

    async def _run_connect(self, channel_id: ChannelIdField, *, recovering: bool = False) -> bool:
        """Body of the single in-flight connection attempt. Entered in ``CONNECTING``."""
        connected = await self._attempt_connect(channel_id, retry=not recovering)

        if self._state is not PlaybackState.CONNECTING:
            # disconnect() won the race while we were joining
            if connected:
                await self._voice_adapter.disconnect(self._guild_id)
            return False

        if not connected:
            if recovering:
                logger.error(LogTemplates.COORDINATOR_RECONNECT_FAILED, self._guild_id)
            else:
                logger.warning(
                    LogTemplates.COORDINATOR_CONNECT_FAILED, self._guild_id, channel_id
                )
            self._drop_transport()
            return False

        self._set_state(PlaybackState.IDLE)
        self._queue.touch()
        await self._resume_pending()
        return self._state.is_connected

    async def _resume_pending(self) -> None:
        """Restart an interrupted ``current``, otherwise start the next entry."""
        interrupted = self._queue.current
        if interrupted is not None:
            if await self._start(interrupted):
                return
            if not self._state.is_connected:
                return
        elif not self._queue.has_pending:
            return
        await self.play_next()

    def _inside_connect(self) -> bool:
        return self._connect_task is not None and self._connect_task is asyncio.current_task()

    async def _attempt_connect(self, channel_id: ChannelIdField, *, retry: bool) -> bool:
        attempts = 2 if retry else 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._voice_adapter.connect(self._guild_id, channel_id)
            except VoiceTransportError as exc:
                if not exc.transient or attempt == attempts:
                    logger.warning(LogTemplates.VOICE_CLIENT_ERROR, exc)
                    return False
                logger.warning(LogTemplates.COORDINATOR_CONNECT_RETRY, self._guild_id, exc)
        return False

    async def disconnect(self) -> None:
        """Leave voice and drop all queue state, including the current entry."""
        self._set_state(PlaybackState.DISCONNECTED)
        try:
            await self._voice_adapter.stop(self._guild_id)
            await self._voice_adapter.disconnect(self._guild_id)
        except VoiceTransportError as exc:
            logger.warning(LogTemplates.VOICE_CLIENT_ERROR, exc)
        self._queue.reset()
        logger.info(LogTemplates.PLAYBACK_STOPPED, self._guild_id)

    async def handle_transport_error(self, error: Exception) -> bool:
        """Try one fast reconnect and resume the interrupted entry.

        The reconnect runs as the coordinator's single connection attempt, so
        a ``connect`` issued meanwhile waits for it instead of racing it.
        """
        if self._connect_task is not None and not self._connect_task.done():
            if self._inside_connect():
                return False
            return await asyncio.shield(self._connect_task)

        if self._state is PlaybackState.DISCONNECTED:
            return False

        if self._channel_id is None:
            logger.warning(LogTemplates.COORDINATOR_RECONNECT_NO_CHANNEL, self._guild_id)
            self._drop_transport()
            return False

        logger.warning(LogTemplates.COORDINATOR_RECONNECTING, self._guild_id, error)
        self._set_state(PlaybackState.CONNECTING)
        self._connect_task = asyncio.create_task(
            self._run_connect(self._channel_id, recovering=True)
        )
        return await asyncio.shield(self._connect_task)

    def _drop_transport(self) -> None:
        self._set_state(PlaybackState.DISCONNECTED)
        self._queue.on_current_finished()

    # ── Queue and playback ──────────────────────────────────────────

    async def add_to_queue(self, entry: QueueEntry) -> EnqueueOutcome:
        outcome = self._queue.enqueue(entry)
        if not outcome.is_accepted:
            logger.info(
                LogTemplates.QUEUE_REJECTED, entry.track.title, self._guild_id, outcome.value
            )
            return outcome

        self._queue.touch()
        logger.info(
            LogTemplates.QUEUE_ENQUEUED, entry.track.title, entry.lane.value, self._guild_id
        )

        if self._state is PlaybackState.IDLE:
            await self.play_next()
        return outcome

    async def add_many(
        self, entries: Sequence[QueueEntry], *, shuffle: bool = False
    ) -> BatchEnqueueResult:
        """Queue a batch of entries, then start playback once if idle.

        Each entry goes through the same capacity and quota checks as
        ``add_to_queue``; rejected entries are reported, not raised.
        """
        batch = list(entries)
        if shuffle:
            random.shuffle(batch)

        result = BatchEnqueueResult(
            outcomes=[(entry, self._queue.enqueue(entry)) for entry in batch]
        )
        logger.info(
            LogTemplates.QUEUE_BATCH_ENQUEUED,
            result.accepted_count,
            len(batch),
            self._guild_id,
        )

        if result.accepted_count:
            self._queue.touch()
            if self._state is PlaybackState.IDLE:
                await self.play_next()
        return result

    async def play_next(self) -> QueueEntry | None:
        """Start the next entry, skipping any whose audio cannot be resolved."""
        if not self._state.is_connected:
            return None
        if self._queue.current is not None:
            return self._queue.current

        while (entry := self._queue.dequeue_next()) is not None:
            if await self._start(entry):
                return self._queue.current
            if not self._state.is_connected or self._queue.current is not None:
                return self._queue.current

        self._set_state(PlaybackState.IDLE)
        self._queue.touch()
        logger.info(LogTemplates.QUEUE_EXHAUSTED, self._guild_id)

        last = self._last_finished
        await self._event_bus.publish(
            QueueExhausted(
                guild_id=self._guild_id,
                last_track_id=str(last.track.id) if last else None,
                last_track_title=last.track.title if last else "",
            )
        )
        return None

    async def handle_track_ended(self) -> None:
        """Transport callback for natural completion or a forced stop."""
        if not self._state.has_active_track:
            logger.debug(LogTemplates.COORDINATOR_IGNORING_TRACK_END, self._guild_id, self._state)
            return

        finished = self._queue.on_current_finished()
        if finished is not None:
            self._last_finished = finished

        if finished is not None and self._queue.loop_enabled:
            self._queue.replay(finished)
            logger.info(LogTemplates.PLAYBACK_LOOPING, finished.track.title, self._guild_id)
            if await self._start(finished, looped=True):
                return
            if not self._state.is_connected:
                return

        await self.play_next()

    async def _start(self, entry: QueueEntry, *, looped: bool = False) -> bool:
        """Stream the entry installed as ``current``. False when it did not start."""
        try:
            started = await self._voice_adapter.play(self._guild_id, entry.track.audio_source)
        except AudioSourceUnresolvableError as exc:
            logger.warning(
                LogTemplates.AUDIO_SOURCE_UNRESOLVABLE,
                entry.track.title,
                self._guild_id,
                exc.reason,
            )
            self._queue.on_current_finished()
            await self._event_bus.publish(
                TrackPlaybackFailed(
                    guild_id=self._guild_id,
                    track_id=str(entry.track.id),
                    track_title=entry.track.title,
                    reason=exc.reason,
                )
            )
            return False

        if self._queue.current is not entry or not self._state.is_connected:
            # Torn down or skipped past while the transport was starting.
            return False

        if not started:
            error = VoiceTransportError(
                ErrorMessages.VOICE_NOT_CONNECTED.format(guild_id=self._guild_id)
            )
            if self._inside_connect():
                # Refused right after (re)joining; give up rather than loop.
                self._drop_transport()
                return False
            return await self.handle_transport_error(error)

        self._set_state(PlaybackState.PLAYING)
        self._queue.touch()
        logger.info(LogTemplates.PLAYBACK_STARTED, entry.track.title, self._guild_id)

        await self._event_bus.publish(
            TrackStartedPlaying(
                guild_id=self._guild_id,
                track_id=str(entry.track.id),
                track_title=entry.track.title,
                requested_by_id=entry.requested_by,
                is_pinned=entry.is_pinned,
                looped=looped,
            )
        )
        await self._record_play(entry)
        return True

    async def _record_play(self, entry: QueueEntry) -> None:
        if self._catalog is None:
            return
        try:
            await self._catalog.increment_play_count(str(entry.track.id))
        except Exception:
            logger.exception(
                LogTemplates.CATALOG_PLAY_COUNT_FAILED, entry.track.id, self._guild_id
            )

    # ── Controls ────────────────────────────────────────────────────

    async def pause(self) -> bool:
        if self._state is not PlaybackState.PLAYING:
            return False
        if not await self._voice_adapter.pause(self._guild_id):
            return False
        self._set_state(PlaybackState.PAUSED)
        self._queue.touch()
        logger.info(LogTemplates.PLAYBACK_PAUSED, self._guild_id)
        return True

    async def resume(self) -> bool:
        if self._state is not PlaybackState.PAUSED:
            return False
        if not await self._voice_adapter.resume(self._guild_id):
            return False
        self._set_state(PlaybackState.PLAYING)
        self._queue.touch()
        logger.info(LogTemplates.PLAYBACK_RESUMED, self._guild_id)
        return True

    async def skip(self) -> bool:
        """Stop the current track; the track-end callback does the advancing."""
        current = self._queue.current
        if current is None or not self._state.has_active_track:
            return False

        self._queue.touch()
        logger.info(LogTemplates.PLAYBACK_SKIPPED, current.track.title, self._guild_id)
        return await self._voice_adapter.stop(self._guild_id)

    async def vote_skip(self, user_id: int) -> SkipVoteTally | None:
        """Count a vote while a track is playing or paused.

        When the deciding vote cannot stop the track it is withdrawn, so the
        next distinct vote crosses the threshold again.
        """
        if self._queue.current is None or not self._state.has_active_track:
            return None

        tally = self._queue.add_skip_vote(user_id)
        self._queue.touch()
        logger.debug(LogTemplates.SKIP_VOTE_CAST, self._guild_id, tally.get_progress_string())

        if not tally.threshold_reached:
            return tally

        logger.info(LogTemplates.SKIP_VOTE_PASSED, self._guild_id)
        if await self.skip():
            return tally

        logger.warning(LogTemplates.SKIP_VOTE_WITHDRAWN, self._guild_id, user_id)
        self._queue.withdraw_skip_vote(user_id)
        return tally.model_copy(
            update={"total_votes": tally.total_votes - 1, "threshold_reached": False}
        )

    def set_loop(self, enabled: bool) -> None:
        self._queue.set_loop(enabled)
        self._queue.touch()
        logger.info(LogTemplates.LOOP_MODE_CHANGED, enabled, self._guild_id)

    def remove_by_track_id(self, track_id: str) -> bool:
        removed = self._queue.remove_by_track_id(track_id)
        if removed:
            logger.info(LogTemplates.QUEUE_REMOVED, track_id, self._guild_id)
        return removed

    def clear_queue(self) -> int:
        count = self._queue.clear()
        self._queue.touch()
        logger.info(LogTemplates.QUEUE_CLEARED, count, self._guild_id)
        return count

    # ── Internal ────────────────────────────────────────────────────

    def _set_state(self, target: PlaybackState) -> None:
        if target is self._state:
            return
        if not self._state.can_transition_to(target):
            raise InvalidOperationError(
                operation=f"transition to {target.value}",
                current_state=self._state.value,
            )
        logger.debug(
            LogTemplates.COORDINATOR_STATE_CHANGED, self._guild_id, self._state.value, target.value
        )
        self._state = target
