"""
Cleanup Task

Celery beat task for periodic reaping of expired projects.
Thin wrapper that delegates to the ExpiryReaper application service.
"""

import logging

from celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="sharebox.tasks.cleanup_expired_projects")
def cleanup_expired_projects(self):
    """
    Periodic task that deletes the blobs of expired projects and marks the
    projects deleted.

    Runs every CLEANUP_INTERVAL_SECONDS (Celery beat schedule). The reaper
    is resolved from the DependencyContainer; the task never touches
    infrastructure directly.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    logger.info("Starting expired project cleanup")

    cleanup_stats = {
        "deleted_projects": 0,
        "deleted_files": 0,
        "bytes_reclaimed": 0,
        "failed_projects": 0,
        "failed_files": 0,
        "errors": [],
    }

    try:
        from celery_app import flask_app
        from sharebox.application.reaper_service import ExpiryReaper

        container = flask_app.container
        if container is None:
            raise RuntimeError("Dependency container not initialized")
        reaper = container.resolve(ExpiryReaper)

        report = reaper.execute()
        cleanup_stats.update({
            "deleted_projects": report.deleted_projects,
            "deleted_files": report.deleted_files,
            "bytes_reclaimed": report.total_size_deleted,
            "failed_projects": report.failed_projects,
            "failed_files": report.failed_files,
        })
        if report.failed_projects:
            cleanup_stats["errors"].append(
                f"{report.failed_projects} project(s) could not be cleaned up"
            )

        logger.info(
            f"Cleanup completed - Projects: {cleanup_stats['deleted_projects']}, "
            f"Files: {cleanup_stats['deleted_files']}, "
            f"Bytes: {cleanup_stats['bytes_reclaimed']}, "
            f"Errors: {len(cleanup_stats['errors'])}"
        )
        if cleanup_stats["errors"]:
            logger.warning(f"Cleanup errors: {cleanup_stats['errors']}")

        return cleanup_stats

    except Exception as e:
        error_msg = f"Cleanup task failed: {e}"
        logger.error(error_msg, exc_info=True)
        cleanup_stats["errors"].append(error_msg)
        return cleanup_stats
