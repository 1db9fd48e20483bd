"""Launching the target service as a subprocess."""

import asyncio
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Optional

import structlog

from ..config import Target
from ..exceptions import ProcessStartError


logger = structlog.get_logger(__name__)

# Tells the service to start only what is needed to serve its API.
RESTRICTED_ENVIRONMENT_ARGUMENT = "API_ONLY_RESTRICTED_ENVIRONMENT"

# Seconds to wait for the output readers once the process is gone. Children
# of the service may keep its pipes open after it was killed.
OUTPUT_DRAIN_TIMEOUT = 2.0


class ServiceProcess:
    """Handle of a running service process and its output readers."""

    def __init__(self, name: str, process: asyncio.subprocess.Process) -> None:
        """Initialize the handle.

        Args:
            name: Process name used to tag its log output
            process: The spawned process
        """
        self.name = name
        self.process = process
        self._tasks: List[asyncio.Task] = []
        self._killed = False

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode

    def start_monitoring(self) -> None:
        """Start forwarding process output and watching for its exit."""
        self._tasks = [
            asyncio.create_task(self._forward_output(self.process.stdout, "stdout")),
            asyncio.create_task(self._forward_output(self.process.stderr, "stderr")),
            asyncio.create_task(self._watch_exit()),
        ]

    async def wait_for_exit(self, timeout: float) -> Optional[int]:
        """Wait up to ``timeout`` seconds for the process to exit.

        Returns:
            Exit code, or None if the process is still running
        """
        if timeout <= 0:
            return self.process.returncode

        try:
            return await asyncio.wait_for(self.process.wait(), timeout)
        except asyncio.TimeoutError:
            return None

    async def kill(self) -> None:
        """Kill the process and wait until its output has been drained.

        Output readers still blocked after OUTPUT_DRAIN_TIMEOUT seconds are
        cancelled.

        Killing an already exited process is not an error. Only the first call
        has an effect.
        """
        if self._killed:
            return
        self._killed = True

        if self.process.returncode is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                # the process has already completed
                pass

        # Waiting for the exit can also block on pipes held open by children.
        tasks = self._tasks or [asyncio.create_task(self.process.wait())]
        _, pending = await asyncio.wait(tasks, timeout=OUTPUT_DRAIN_TIMEOUT)
        for task in pending:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        logger.info(
            "The process was stopped",
            process=self.name,
            exit_code=self.process.returncode,
        )

    async def _forward_output(
        self, stream: Optional[asyncio.StreamReader], stream_name: str
    ) -> None:
        if stream is None:
            return

        while True:
            line = await stream.readline()
            if not line:
                break

            text = line.decode(errors="replace").rstrip("\r\n")
            if stream_name == "stderr":
                logger.warning("Service error output", process=self.name, line=text)
            else:
                logger.info("Service output", process=self.name, line=text)

    async def _watch_exit(self) -> None:
        exit_code = await self.process.wait()
        logger.info("Process exited", process=self.name, exit_code=exit_code)


class ServiceLauncher:
    """Starts the executable serving the GraphQL API."""

    def __init__(self, host_command: str = "dotnet", startup_grace: float = 0.5) -> None:
        """Initialize the launcher.

        Args:
            host_command: Program that runs the executable; empty runs it directly
            startup_grace: Seconds to watch the process for a crash on start
        """
        self.host_command = host_command
        self.startup_grace = startup_grace

    def build_command(self, target: Target) -> List[str]:
        """Build the argument list used to start the target."""
        if target.from_url or target.executable is None:
            raise ValueError("Only executable targets can be launched")

        command = [self.host_command] if self.host_command else []
        command += [
            os.path.abspath(target.executable),
            RESTRICTED_ENVIRONMENT_ARGUMENT,
            "--server.urls",
            target.launch_url or "",
            "--urls",
            target.launch_url or "",
        ]
        command += list(target.extra_args)
        return command

    @asynccontextmanager
    async def launch(self, target: Target) -> AsyncIterator[ServiceProcess]:
        """Run the target for the duration of the context.

        The process is killed when the context exits, whatever the reason.

        Raises:
            ProcessStartError: If the process could not be spawned or exited
                right after starting
        """
        command = self.build_command(target)
        executable = target.executable or ""
        name = Path(executable).stem
        # Services resolving relative paths expect to run from their own directory.
        working_dir = os.path.dirname(os.path.abspath(executable))

        logger.info("Executing command", command=" ".join(command), cwd=working_dir)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=working_dir,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Failed to spawn process", process=name, error=str(e))
            raise ProcessStartError(name) from e

        service = ServiceProcess(name, process)
        service.start_monitoring()

        try:
            exit_code = await service.wait_for_exit(self.startup_grace)
            if exit_code is not None:
                raise ProcessStartError(name, exit_code)

            logger.info(
                "The process was started",
                process=name,
                pid=service.pid,
                url=target.launch_url,
            )
            yield service
        finally:
            await service.kill()
