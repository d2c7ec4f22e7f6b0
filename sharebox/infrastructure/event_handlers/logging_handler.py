"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Subscribes to domain events and logs them appropriately.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from sharebox.domain.events import (
    DomainEvent,
    ProjectAccessedEvent,
    ProjectCreatedEvent,
    ProjectReapedEvent,
    TextRoomUpdatedEvent,
    UploadRolledBackEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and logs them appropriately.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, ProjectCreatedEvent):
                self._handle_project_created(event)
            elif isinstance(event, UploadRolledBackEvent):
                self._handle_upload_rolled_back(event)
            elif isinstance(event, ProjectAccessedEvent):
                self._handle_project_accessed(event)
            elif isinstance(event, ProjectReapedEvent):
                self._handle_project_reaped(event)
            elif isinstance(event, TextRoomUpdatedEvent):
                self._handle_room_updated(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_project_created(self, event: ProjectCreatedEvent) -> None:
        self.logger.info(
            f"Project created: project_id={event.aggregate_id}, "
            f"files={event.file_count}, total_size={event.total_size} bytes, "
            f"expires_at={event.expires_at.isoformat()}"
        )

    def _handle_upload_rolled_back(self, event: UploadRolledBackEvent) -> None:
        self.logger.warning(
            f"Upload rolled back: project_id={event.aggregate_id}, "
            f"stage={event.stage}, reason={event.reason}"
        )

    def _handle_project_accessed(self, event: ProjectAccessedEvent) -> None:
        if event.file_name:
            self.logger.info(
                f"Project accessed: project_id={event.aggregate_id}, "
                f"action={event.action}, file={event.file_name}"
            )
        else:
            self.logger.info(
                f"Project accessed: project_id={event.aggregate_id}, action={event.action}"
            )

    def _handle_project_reaped(self, event: ProjectReapedEvent) -> None:
        level = logging.WARNING if event.files_failed else logging.INFO
        self.logger.log(
            level,
            f"Project reaped: project_id={event.aggregate_id}, "
            f"files_deleted={event.files_deleted}, files_failed={event.files_failed}, "
            f"bytes_reclaimed={event.bytes_reclaimed}",
        )

    def _handle_room_updated(self, event: TextRoomUpdatedEvent) -> None:
        self.logger.debug(
            f"Text room updated: room_id={event.aggregate_id}, length={event.content_length}"
        )
