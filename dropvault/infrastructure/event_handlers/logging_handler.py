"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Subscribes to domain events and logs them appropriately.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from dropvault.domain.events import (
    DomainEvent,
    FileDeletedEvent,
    FileDownloadedEvent,
    FileReapedEvent,
    FileUploadedEvent,
    ReapCompletedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and logs them appropriately.
    Domain layer remains unaware of logging infrastructure.
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
            if isinstance(event, FileUploadedEvent):
                self._handle_uploaded(event)
            elif isinstance(event, FileDownloadedEvent):
                self._handle_downloaded(event)
            elif isinstance(event, FileDeletedEvent):
                self._handle_deleted(event)
            elif isinstance(event, FileReapedEvent):
                self._handle_reaped(event)
            elif isinstance(event, ReapCompletedEvent):
                self._handle_reap_completed(event)
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

    def _handle_uploaded(self, event: FileUploadedEvent) -> None:
        self.logger.info(
            f"File uploaded: file_id={event.aggregate_id}, "
            f"visibility={event.visibility}, size={event.size_bytes} bytes, "
            f"owner={event.owner_id or '-'}, expires_at={event.expires_at.isoformat()}"
        )

    def _handle_downloaded(self, event: FileDownloadedEvent) -> None:
        self.logger.info(
            f"File downloaded: file_id={event.aggregate_id}, "
            f"count={event.download_count}/{event.max_downloads}"
        )

    def _handle_deleted(self, event: FileDeletedEvent) -> None:
        self.logger.info(
            f"File deleted by owner: file_id={event.aggregate_id}, "
            f"owner={event.owner_id}, blob_existed={event.blob_existed}"
        )

    def _handle_reaped(self, event: FileReapedEvent) -> None:
        self.logger.debug(
            f"Expired file reaped: file_id={event.aggregate_id}, "
            f"expired_at={event.expired_at.isoformat()}, blob_deleted={event.blob_deleted}"
        )

    def _handle_reap_completed(self, event: ReapCompletedEvent) -> None:
        level = logging.WARNING if event.record_failures else logging.INFO
        self.logger.log(
            level,
            f"Reaper run completed: run_id={event.aggregate_id}, "
            f"scanned={event.scanned}, deleted={event.records_deleted}, "
            f"blob_failures={event.blob_failures}, "
            f"record_failures={event.record_failures}",
        )
