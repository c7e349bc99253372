"""Docker Compose runtime adapter built on `subprocess`."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .errors import ComposeCommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposeCommandResult:
    """Captured result of one finished process invocation.

    Attributes:
        argv: Executed argument vector.
        return_code: Process exit code.
        output: Combined stdout and stderr text.
    """

    argv: tuple[str, ...]
    return_code: int
    output: str


class DockerComposeAdapter:
    """Adapter that drives `docker compose` for one project directory."""

    def __init__(
        self,
        project_directory: Path,
        compose_file: str = "docker-compose.yml",
        compose_command: str = "docker compose",
        command_timeout_seconds: float = 900.0,
    ):
        """Initialize compose adapter.

        Args:
            project_directory: Directory holding the compose file.
            compose_file: Compose file name relative to project directory.
            compose_command: Compose binary invocation, `docker compose` or `docker-compose`.
            command_timeout_seconds: Upper bound for one compose invocation.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when command or file values are blank.
        """

        compose_argv = tuple(shlex.split(compose_command))
        if not compose_argv:
            raise ValueError("compose_command must not be blank")
        if not compose_file.strip():
            raise ValueError("compose_file must not be blank")
        if command_timeout_seconds <= 0:
            raise ValueError("command_timeout_seconds must be > 0")

        self._project_directory = Path(project_directory)
        self._compose_file = compose_file.strip()
        self._compose_argv = compose_argv
        self._command_timeout_seconds = command_timeout_seconds

    def adapter_missing_prerequisites(self) -> list[str]:
        """Return required executables that are not available on PATH."""

        required_binaries = ["docker"]
        if self._compose_argv[0] != "docker":
            required_binaries.append(self._compose_argv[0])
        return [binary for binary in required_binaries if shutil.which(binary) is None]

    def adapter_up(self) -> ComposeCommandResult:
        """Build images and start all services detached."""

        return self._adapter_run_compose("up", "-d", "--build")

    def adapter_down(self, remove_volumes: bool = True, remove_orphans: bool = False) -> ComposeCommandResult:
        """Stop and remove services, optionally with volumes and orphans."""

        arguments = ["down"]
        if remove_volumes:
            arguments.append("-v")
        if remove_orphans:
            arguments.append("--remove-orphans")
        return self._adapter_run_compose(*arguments)

    def adapter_ps(self) -> ComposeCommandResult:
        """Return container status listing."""

        return self._adapter_run_compose("ps")

    def adapter_logs_tail(self, service_name: str | None = None, tail_lines: int = 20) -> str:
        """Return the last log lines of all services or one service.

        Never raises: log collection is diagnostic only.
        """

        arguments = ["logs", "--no-color", f"--tail={tail_lines}"]
        if service_name:
            arguments.append(service_name)
        try:
            return self._adapter_run_compose(*arguments).output
        except ComposeCommandError as error:
            return error.output or str(error)

    def adapter_system_prune(self) -> ComposeCommandResult:
        """Prune unused docker objects."""

        return self._adapter_run(("docker", "system", "prune", "-f"))

    def _adapter_run_compose(self, *arguments: str) -> ComposeCommandResult:
        argv = (*self._compose_argv, "-f", self._compose_file, *arguments)
        return self._adapter_run(argv)

    def _adapter_run(self, argv: tuple[str, ...]) -> ComposeCommandResult:
        """Execute one process and map failures to `ComposeCommandError`.

        Args:
            argv: Argument vector.

        Returns:
            ComposeCommandResult: Result for a zero exit code.

        Raises:
            ComposeCommandError: Raised when the process cannot start, times out or exits non-zero.
        """

        rendered_command = shlex.join(argv)
        logger.debug("Running %s in %s", rendered_command, self._project_directory)
        try:
            completed = subprocess.run(
                list(argv),
                cwd=self._project_directory,
                capture_output=True,
                text=True,
                timeout=self._command_timeout_seconds,
                check=False,
            )
        except FileNotFoundError as error:
            raise ComposeCommandError(f"executable not found: {argv[0]}", target=rendered_command) from error
        except subprocess.TimeoutExpired as error:
            raise ComposeCommandError(
                f"command timed out after {self._command_timeout_seconds}s", target=rendered_command
            ) from error

        output = (completed.stdout or "") + (completed.stderr or "")
        if completed.returncode != 0:
            raise ComposeCommandError(
                f"command exited with code {completed.returncode}",
                target=rendered_command,
                return_code=completed.returncode,
                output=output,
            )
        return ComposeCommandResult(argv=argv, return_code=completed.returncode, output=output)
