import itertools
import threading
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from grading.errors import ExecutionTimeout
from grading.managers.docker_manager import DockerManager
from grading.managers.grading_manager import GradingManager
from grading.managers.staging_manager import StagingManager
from grading.managers.workspace_manager import WorkspaceManager
from grading.models.database import Assignment, Base, Subject, Submission
from grading.models.results import ProcessOutput
from grading.repositories.assignment_repository import AssignmentRepository
from grading.security.ownership import SubjectOwnershipPolicy
from grading.toolchains import build_toolchains

TEACHER = "teacher@example.com"


class FakeDockerRunner:
    """
    Stands in for ProcessRunner when the command is `docker ...`.

    A `docker run` echoes the staged source file as the container's stdout,
    so each test submission carries the output its toolchain would print.
    Sources containing TIMEOUT or LAUNCHFAIL simulate those failures.
    """

    def __init__(self):
        self.commands = []
        self.staged = {}
        self._lock = threading.Lock()

    def run(self, cmd, timeout, cancel_event=None):
        with self._lock:
            self.commands.append(list(cmd))
        if cmd[1] != "run":
            return ProcessOutput(returncode=0, stdout="", stderr="", duration_seconds=0.0)

        host_path = Path(cmd[cmd.index("-v") + 1].rsplit(":", 1)[0])
        with self._lock:
            self.staged[host_path] = sorted(p.name for p in host_path.iterdir())

        content = next(host_path.glob("main.*")).read_text()
        if "TIMEOUT" in content:
            raise ExecutionTimeout(f"execution_timeout: exceeded {timeout}s")
        if "LAUNCHFAIL" in content:
            return ProcessOutput(returncode=125, stdout="", stderr="docker: error", duration_seconds=0.01)
        return ProcessOutput(returncode=0, stdout=content, stderr="", duration_seconds=0.01)

    @property
    def run_commands(self):
        return [c for c in self.commands if c[1] == "run"]


@pytest.fixture
def session():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def fixture_files(tmp_path):
    root = tmp_path / "assignments" / "1"
    root.mkdir(parents=True)
    files = {
        "input": root / "input",
        "output": root / "output",
        "question": root / "question",
    }
    files["input"].write_text("1 2\n")
    files["output"].write_text("3\n")
    files["question"].write_text("Add two numbers.\n")
    return files


@pytest.fixture
def scripts_dir(tmp_path):
    root = tmp_path / "toolchains"
    root.mkdir()
    (root / "c-script.sh").write_text("#!/bin/sh\ngcc main.c && ./a.out\n")
    (root / "cpp-script.sh").write_text("#!/bin/sh\ng++ main.$CodeFileExt && ./a.out\n")
    return root


@pytest.fixture
def workspace_root(tmp_path):
    return tmp_path / "workspaces"


@pytest.fixture
def assignment(session, fixture_files):
    subject = Subject(name="Algorithms", teacher_email=TEACHER)
    session.add(subject)
    session.flush()
    assignment = Assignment(
        subject_id=subject.id,
        title="Sum",
        input_path=str(fixture_files["input"]),
        output_path=str(fixture_files["output"]),
        question_path=str(fixture_files["question"]),
    )
    session.add(assignment)
    session.commit()
    return assignment


@pytest.fixture
def make_submission(session, assignment, tmp_path):
    counter = itertools.count(1)

    def _make(filename, content, student="student@example.com"):
        upload_dir = tmp_path / "uploads" / str(next(counter))
        upload_dir.mkdir(parents=True)
        source = upload_dir / filename
        source.write_text(content)
        submission = Submission(
            assignment_id=assignment.id,
            student_email=student,
            source_path=str(source),
        )
        session.add(submission)
        session.commit()
        return submission

    return _make


@pytest.fixture
def fake_runner():
    return FakeDockerRunner()


@pytest.fixture
def build_manager(session, workspace_root, scripts_dir, fake_runner):
    def _build(max_workers=1, workspace_manager=None, repository=None, authorizer=None):
        return GradingManager(
            repository=repository or AssignmentRepository(session),
            authorizer=authorizer or SubjectOwnershipPolicy(session),
            workspace_manager=workspace_manager or WorkspaceManager(workspace_root),
            staging_manager=StagingManager(scripts_dir),
            docker_manager=DockerManager(build_toolchains(), runner=fake_runner),
            max_workers=max_workers,
        )

    return _build
