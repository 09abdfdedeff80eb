import pytest

from grading.errors import ExecutionError, ExecutionTimeout, GradingCancelled, UnsupportedLanguageError
from grading.managers.docker_manager import DockerManager
from grading.models.results import ProcessOutput, WorkspaceHandle
from grading.toolchains import build_toolchains, SourceLanguage


class RecordingRunner:

    def __init__(self, output=None, error=None):
        self.output = output or ProcessOutput(returncode=0, stdout="10\n", stderr="", duration_seconds=0.2)
        self.error = error
        self.calls = []

    def run(self, cmd, timeout, cancel_event=None):
        self.calls.append((list(cmd), timeout))
        if self.error is not None and cmd[1] == "run":
            raise self.error
        return self.output


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "submission-4"
    path.mkdir()
    return WorkspaceHandle(submission_id=4, path=path)


def test_c_invocation(workspace):
    runner = RecordingRunner()
    manager = DockerManager(build_toolchains(), runner=runner, run_timeout_seconds=30)

    raw = manager.execute(workspace, SourceLanguage.C, extension_hint="c")

    cmd, timeout = runner.calls[0]
    name = cmd[4]
    assert name.startswith("grading-4-")
    assert cmd == [
        "docker", "run", "--rm", "--name", name,
        "-v", f"{workspace.path.resolve()}:/home/files",
        "-w", "/home/files",
        "gcc:7.3", "./c-script.sh",
    ]
    assert timeout == 30
    assert raw.stdout == "10\n"
    assert raw.score_line == "10"
    assert raw.exit_code == 0


def test_cpp_invocation_passes_extension(workspace):
    runner = RecordingRunner()
    manager = DockerManager(
        build_toolchains({"cpp": "gcc:13"}),
        runner=runner,
        docker_binary="/usr/bin/podman",
        mount_path="/work",
    )

    manager.execute(workspace, SourceLanguage.CPP, extension_hint="cxx")

    cmd = runner.calls[0][0]
    assert cmd[0] == "/usr/bin/podman"
    assert cmd[5:7] == ["-e", "CodeFileExt=cxx"]
    assert cmd[-4:] == ["-w", "/work", "gcc:13", "./cpp-script.sh"]


def test_hostile_filename_stays_one_argument(tmp_path):
    path = tmp_path / "submission-9; rm -rf ~"
    path.mkdir()
    runner = RecordingRunner()

    DockerManager(build_toolchains(), runner=runner).execute(
        WorkspaceHandle(submission_id=9, path=path), SourceLanguage.C
    )

    cmd = runner.calls[0][0]
    assert f"{path.resolve()}:/home/files" in cmd


@pytest.mark.parametrize("code", [125, 126, 127])
def test_launch_failure(workspace, code):
    runner = RecordingRunner(ProcessOutput(returncode=code, stdout="", stderr="no such image", duration_seconds=0.1))

    with pytest.raises(ExecutionError, match="container_launch_failed"):
        DockerManager(build_toolchains(), runner=runner).execute(workspace, SourceLanguage.C)


def test_nonzero_exit_still_returns_output(workspace):
    runner = RecordingRunner(ProcessOutput(returncode=1, stdout="compile error\n0\n", stderr="", duration_seconds=0.1))

    raw = DockerManager(build_toolchains(), runner=runner).execute(workspace, SourceLanguage.C)

    assert raw.exit_code == 1
    assert raw.score_line == "0"


@pytest.mark.parametrize("error", [
    ExecutionTimeout("execution_timeout: exceeded 1s"),
    GradingCancelled("grading_cancelled"),
])
def test_abnormal_end_removes_container(workspace, error):
    runner = RecordingRunner(error=error)

    with pytest.raises(type(error)):
        DockerManager(build_toolchains(), runner=runner).execute(workspace, SourceLanguage.C)

    run_cmd, cleanup_cmd = runner.calls[0][0], runner.calls[1][0]
    assert cleanup_cmd == ["docker", "rm", "-f", run_cmd[4]]


def test_missing_toolchain(workspace):
    runner = RecordingRunner()

    with pytest.raises(UnsupportedLanguageError):
        DockerManager({}, runner=runner).execute(workspace, SourceLanguage.C)
    assert runner.calls == []
