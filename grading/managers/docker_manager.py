import threading
from typing import List, Mapping, Optional
from uuid import uuid4

from loguru import logger

from grading.errors import ExecutionError, ExecutionTimeout, GradingCancelled, UnsupportedLanguageError
from grading.managers.process_runner import ProcessRunner
from grading.models.results import RawOutput, WorkspaceHandle
from grading.toolchains import SourceLanguage, Toolchain

# docker run exit codes meaning the container never ran the entrypoint
DOCKER_LAUNCH_FAILURE_CODES = {125, 126, 127}


class DockerManager:
    def __init__(
        self,
        toolchains: Mapping[SourceLanguage, Toolchain],
        runner: Optional[ProcessRunner] = None,
        docker_binary: str = "docker",
        mount_path: str = "/home/files",
        run_timeout_seconds: float = 120,
        cleanup_timeout_seconds: float = 30,
    ):
        self.toolchains = toolchains
        self.runner = runner or ProcessRunner()
        self.docker_binary = docker_binary
        self.mount_path = mount_path
        self.run_timeout_seconds = run_timeout_seconds
        self.cleanup_timeout_seconds = cleanup_timeout_seconds

    def toolchain_for(self, language: SourceLanguage) -> Toolchain:
        toolchain = self.toolchains.get(language)
        if toolchain is None:
            raise UnsupportedLanguageError(f"no_toolchain: {language.value}")
        return toolchain

    def build_command(
        self,
        workspace: WorkspaceHandle,
        toolchain: Toolchain,
        container_name: str,
        extension_hint: Optional[str] = None,
    ) -> List[str]:
        cmd = [self.docker_binary, "run", "--rm", "--name", container_name]
        if toolchain.extension_env and extension_hint:
            cmd += ["-e", f"{toolchain.extension_env}={extension_hint}"]
        cmd += [
            "-v", f"{workspace.path.resolve()}:{self.mount_path}",
            "-w", self.mount_path,
            toolchain.image,
            f"./{toolchain.entrypoint}",
        ]
        return cmd

    def execute(
        self,
        workspace: WorkspaceHandle,
        language: SourceLanguage,
        extension_hint: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RawOutput:
        toolchain = self.toolchain_for(language)
        container_name = f"grading-{workspace.submission_id}-{uuid4().hex[:8]}"
        cmd = self.build_command(workspace, toolchain, container_name, extension_hint)

        logger.debug(
            "container_starting",
            submission_id=workspace.submission_id,
            container=container_name,
            image=toolchain.image,
        )

        try:
            result = self.runner.run(cmd, timeout=self.run_timeout_seconds, cancel_event=cancel_event)
        except ExecutionTimeout:
            logger.warning("container_timeout", submission_id=workspace.submission_id, container=container_name)
            self._remove_container(container_name)
            raise
        except GradingCancelled:
            logger.warning("container_cancelled", submission_id=workspace.submission_id, container=container_name)
            self._remove_container(container_name)
            raise

        if result.returncode in DOCKER_LAUNCH_FAILURE_CODES:
            raise ExecutionError(f"container_launch_failed: exit_code_{result.returncode}: {result.stderr[:1000]}")

        if result.returncode != 0:
            logger.warning(
                "container_nonzero_exit",
                submission_id=workspace.submission_id,
                exit_code=result.returncode,
            )

        logger.info(
            "container_finished",
            submission_id=workspace.submission_id,
            exit_code=result.returncode,
            execution_time=round(result.duration_seconds, 3),
        )

        return RawOutput(
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr[:10000],
            execution_time_seconds=result.duration_seconds,
        )

    def _remove_container(self, container_name: str) -> None:
        try:
            self.runner.run(
                [self.docker_binary, "rm", "-f", container_name],
                timeout=self.cleanup_timeout_seconds,
            )
        except ExecutionError as e:
            logger.error("container_remove_failed", container=container_name, error=str(e))
