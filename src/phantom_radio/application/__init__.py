"""
Application Layer

Contains use cases, command/query handlers, and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- commands/: Write operations (RequestTrackCommand, VoteSkipCommand, etc.)
- queries/: Read operations (GetQueueQuery)
- services/: Playback coordinator, session registry, selection rotation, idle reaper
- interfaces/: Port interfaces for infrastructure adapters
"""
