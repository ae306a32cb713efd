"""Remote image builds from local source.

The platform builds images asynchronously: the client uploads a build
context, receives a build job and then polls it until the job reaches a
terminal state. Nothing is pushed from the server, so the whole state
machine lives here::

    submitted -> running (any non-terminal status) -> completed | failed

A failed build is always fatal for the current ``deploy`` invocation.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger
from rich.markup import escape

from coderun.utils.console_like import ConsoleLike, coalesce_console

from .errors import BackendRejection, BuildFailure, BuildTimeout, CodeRunError
from .packaging import (
    build_context_archive,
    pack_build_context,
    validate_build_context,
    validate_dockerfile,
)
from .translator import translate

if TYPE_CHECKING:
    from coderun.api.client import PlatformClient
    from coderun.api.models import BuildJob

    from .request import BuildSource

DEFAULT_POLL_INTERVAL = 5.0


class BuildOrchestrator:
    """Drives one remote build from archive upload to a terminal state.

    Attributes:
        gateway: Platform API client
        console: Output for progress and build logs
        poll_interval: Seconds to wait between status polls
        timeout: Optional ceiling in seconds; None polls until a terminal state
    """

    def __init__(
        self,
        gateway: PlatformClient,
        console: ConsoleLike | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            gateway: Platform API client
            console: Output sink (plain stdout if not provided)
            poll_interval: Seconds between status polls
            timeout: Give up after this many seconds of polling (None = never)
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock, replaceable in tests
        """
        self.gateway = gateway
        self.console = coalesce_console(console)
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._sleep = sleep
        self._clock = clock

    def build_image(self, source: BuildSource, app_name: str) -> str:
        """Package ``source``, build it remotely and return the image URI.

        The temporary archive is removed on every exit path.

        Raises:
            FileSystemError: Missing context, missing Dockerfile, archive errors
            BuildFailure: The build job failed
            CodeRunError: Upload rejected or polling failed
        """
        self.console.info(f"Building from source in {source.context_dir}...")
        validate_build_context(source.context_dir)
        validate_dockerfile(source.context_dir, source.dockerfile)

        with build_context_archive(app_name) as archive_path:
            self.console.info("Creating build context archive...")
            pack_build_context(source.context_dir, archive_path)
            job = self.run(archive_path, app_name, source.dockerfile)

        return job.image_uri

    def run(self, archive_path: Path, app_name: str, dockerfile: str) -> BuildJob:
        """Upload ``archive_path`` and poll the build until it finishes.

        Returns:
            The completed build job

        Raises:
            BuildFailure: If the job reaches ``failed``
            BuildTimeout: If a timeout is set and exceeded
        """
        job = self._submit(archive_path, app_name, dockerfile)

        self.console.info("Waiting for build to complete...")
        started = self._clock()
        last_status = job.status

        while True:
            self._sleep(self.poll_interval)

            try:
                job = self.gateway.get_build(job.id)
            except CodeRunError:
                self.console.error("Error checking build status")
                raise

            self.console.print(f"Build status: {job.status}")
            if job.status != last_status:
                logger.debug(f"Build {job.id}: {last_status} -> {job.status}")
                last_status = job.status

            if job.succeeded:
                self.console.ok("Build completed successfully!")
                self._show_logs(job.id)
                return job

            if job.is_terminal:
                self.console.error("Build failed!")
                logs = self._show_logs(job.id)
                raise BuildFailure(job, logs)

            if self.timeout is not None and self._clock() - started >= self.timeout:
                raise BuildTimeout(job.id, self.timeout)

    def _submit(self, archive_path: Path, app_name: str, dockerfile: str) -> BuildJob:
        self.console.info("Uploading build context and starting build...")
        try:
            job = self.gateway.create_build(archive_path, app_name, dockerfile)
        except BackendRejection as e:
            friendly = translate(e.message)
            raise CodeRunError(
                f"Build failed: {friendly}",
                details=e.message if friendly != e.message else None,
            ) from e

        self.console.ok("Build started successfully!")
        self.console.print(f"Build ID: {job.id}")
        self.console.print(f"Status: {job.status}")
        self.console.print(f"Image URI: {job.image_uri}")
        logger.debug(f"Submitted build {job.id} for {app_name}")
        return job

    def _show_logs(self, build_id: str) -> str | None:
        """Fetch and print build logs; failures are reported, not raised."""
        try:
            logs = self.gateway.get_build_logs(build_id)
        except CodeRunError as e:
            self.console.error(f"Could not retrieve build logs: {escape(e.message)}")
            return None
        self.console.block("📋 Build logs:", logs)
        return logs
