"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"

    # Audio Source Errors
    LOCAL_PATH_OUTSIDE_MUSIC_DIR = "path escapes the music directory"
    LOCAL_FILE_MISSING = "file does not exist"
    NO_URL_IN_INFO_DICT = "no playable URL in extracted info"
    YTDLP_EXTRACTION_FAILED = "extraction failed: {error}"

    # Voice Transport Errors
    VOICE_CONNECT_TIMEOUT = "Timed out connecting to voice channel {channel_id}"
    VOICE_CHANNEL_NOT_FOUND = "Voice channel {channel_id} not found"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild {guild_id}"

    # Database Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN is required; set it in the environment or .env"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Catalog
    CATALOG_PLAY_COUNT_FAILED = "Failed to increment play count for %s in guild %s"
    CATALOG_TRACK_UPSERTED = "Upserted catalog track %s"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_PLAYER_ERROR = "Voice player error in guild %s: %r"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_UNEXPECTED_DISCONNECT = "Bot was disconnected from voice in guild %s"

    # Audio Source Resolution
    AUDIO_SOURCE_RESOLVED = "Resolved %s for guild %s"
    AUDIO_SOURCE_UNRESOLVABLE = "Unplayable source for '%s' in guild %s: %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"

    # Coordinator State
    COORDINATOR_STATE_CHANGED = "Guild %s playback state %s -> %s"
    COORDINATOR_CONNECT_JOINING = "Connect already in progress for guild %s, awaiting it"
    COORDINATOR_CONNECT_RETRY = "Transient voice error in guild %s, retrying once: %s"
    COORDINATOR_CONNECT_FAILED = "Failed to connect guild %s to channel %s"
    COORDINATOR_RECONNECTING = "Transport error in guild %s, attempting reconnect: %s"
    COORDINATOR_RECONNECT_FAILED = "Reconnect failed for guild %s, dropping to disconnected"
    COORDINATOR_RECONNECT_NO_CHANNEL = "Transport error in guild %s with no known channel"
    COORDINATOR_IGNORING_TRACK_END = "Ignoring track-end callback for guild %s in state %s"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_LOOPING = "Looping '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_SKIPPED = "Skipped '%s' in guild %s"
    PLAYBACK_CALLBACK_ERROR = "Error in track end callback for guild %s: %s"
    PLAYBACK_NO_CALLBACK = "No track end callback set for guild %s"

    # Queue Operations
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s"
    QUEUE_ENQUEUED = "Enqueued '%s' (%s lane) in guild %s"
    QUEUE_REJECTED = "Rejected '%s' in guild %s: %s"
    QUEUE_BATCH_ENQUEUED = "Enqueued %s of %s playlist tracks in guild %s"
    QUEUE_REMOVED = "Removed track '%s' from queue in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    LOOP_MODE_CHANGED = "Loop mode changed to %s in guild %s"
    SKIP_VOTE_CAST = "Skip vote in guild %s: %s"
    SKIP_VOTE_PASSED = "Skip vote threshold met in guild %s"
    SKIP_VOTE_WITHDRAWN = "Skip failed in guild %s, withdrawing deciding vote from user %s"

    # Session Registry
    SESSION_CREATED = "Created playback session for guild %s"
    SESSION_DISCARDED = "Discarded new playback session for guild %s after failed connect"
    SESSION_DESTROYED = "Destroyed playback session for guild %s (reason=%s)"
    SESSION_NOT_FOUND = "No session found for guild %s"
    SESSION_CALLBACK_UNKNOWN_GUILD = "Voice callback for unknown guild %s"
    SESSION_SHUTDOWN = "Shut down %s playback sessions"

    # Selection Rotation
    SELECTION_JOINED = "User %s joined the selection rotation at position %s"
    SELECTION_LEFT = "User %s left the selection rotation"
    SELECTION_TURN_STARTED = "Selection turn started for user %s (%ss)"
    SELECTION_TURN_EXPIRED = "Selection turn expired for user %s"
    SELECTION_TURN_FINISHED = "Selection turn finished for user %s"
    SELECTION_STALE_TIMER = "Ignoring stale selection timer (generation %s, current %s)"
    SELECTION_EMPTY = "Selection rotation is empty"
    SELECTION_STOPPED = "Selection timer stopped"

    # Idle Reaper
    REAPER_STARTED = "Idle reaper started (idle=%s min, interval=%s min)"
    REAPER_STOPPED = "Idle reaper stopped"
    REAPER_ALREADY_RUNNING = "Idle reaper is already running"
    REAPER_SWEEP_RUNNING = "Running idle sweep over %s sessions"
    REAPER_SWEEP_COMPLETED = "Idle sweep disconnected %s sessions"
    REAPER_SWEEP_FAILED = "Idle sweep failed: %r"

    # Event Bus
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"

    # Application Lifecycle
    BOT_STARTING = "Starting Phantom Radio in %s mode"
    SETTINGS_INVALID = "Invalid setting %s: %s"
    LOGGING_CONFIG_FALLBACK = "Could not apply logging config %s (%s), using console defaults"
    STARTUP_QUEUE_LIMITS = "Queue limits: %s slots, %s per user, %s votes to skip"
    STARTUP_SELECTION = "Selection turns last %ss"
    STARTUP_IDLE = "Idle sessions close after %s min, swept every %s min"
    STARTUP_AUDIO = "Serving local audio from %s at volume %.2f"
    STARTUP_MUSIC_DIR_MISSING = "Music directory %s does not exist; local tracks will fail to resolve"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    BOT_STARTING_RUN = "Starting bot event loop"
    BOT_STOPPED = "Bot stopped"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"


class SelectionMessages:
    """User-facing replies of the song selection rotation."""

    NOT_IN_LINE = "You must **Join Queue** first before selecting a song!"
    NOT_YOUR_TURN = "Please wait your turn! You're #{position} in line."
    ALREADY_SELECTING = "It's already your turn to select!"
    ALREADY_IN_LINE = "You're already in queue at position #{position}"
    YOUR_TURN = "It's your turn! You have {minutes} minutes to select a song."
    JOINED_LINE = "You joined the selection queue at position #{position}. Please wait for your turn!"
    TURN_PASSED = "Thanks! Moving to the next person in queue."
    NOT_IN_ROTATION = "You're not in the selection queue."
    LEFT_LINE = "You left the selection queue."
    NOT_SELECTOR = "It isn't your turn to select."


class RequestMessages:
    """User-facing replies for track requests and vote skips."""

    QUEUED = "Added **{title}** to the queue."
    TRACK_NOT_FOUND = "Song not found."
    QUEUE_FULL = "The queue is full ({max_size} songs). Please wait for some songs to finish."
    USER_QUOTA = "You already have {limit} songs in the queue. Please wait for them to play."
    CONNECT_FAILED = "Could not join the voice channel. Please try again."
    NOTHING_PLAYING = "Nothing is playing right now."
    ALREADY_VOTED = "You already voted. Votes: {votes_current}/{votes_needed}"
    VOTE_RECORDED = "Vote recorded ({votes_current}/{votes_needed})."
    VOTE_PASSED = "Skip vote passed. Skipping the current song."
    STOPPED = "Stopped playback and disconnected."
    PLAYLIST_STARTED = "Queued {count} tracks from the **{category}** playlist."
    PLAYLIST_EMPTY = "No tracks found in the **{category}** playlist."
    PLAYLIST_QUEUE_FULL = "The queue is full. No playlist tracks were added."
