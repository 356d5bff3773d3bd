import http.server
import stat
import sys
import threading
from xml.etree.ElementTree import Element

import pytest

from pminstall.run_step import COMPLETED_MESSAGE, SANDBOX_MESSAGE, RunStep
from pminstall.steps import CancelToken, Host, StepStatus
from pminstall.variables import VariableHandler


class _Handler(http.server.BaseHTTPRequestHandler):
    verdict = b"ok"

    def do_GET(self):
        body = self.server.verdict
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def verdict_server():
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.verdict = b"ok"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server, f"http://127.0.0.1:{server.server_address[1]}/validate/"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "setup.py"
    path.write_text(
        f"#!{sys.executable}\n"
        "import sys, pathlib\n"
        "pathlib.Path(sys.argv[0]).with_name('marker.txt')"
        ".write_text(' '.join(sys.argv[1:]))\n"
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


class _Recorder:
    def __init__(self, answer=False):
        self.answer = answer
        self.questions = []
        self.messages = []
        self.statuses = []

    def host(self):
        return Host(ask=self._ask, notify=self.messages.append)

    def _ask(self, message):
        self.questions.append(message)
        return self.answer


def _perform(step, base, recorder):
    root = Element("gpup")
    result = step.perform(
        base, root, recorder.statuses.append, lambda _p: None, recorder.host(), CancelToken()
    )
    return result, root


def test_outside_host_defers_to_updater(tmp_path):
    step = RunStep("installer.exe", "--all", True, "")
    recorder = _Recorder()
    result, root = _perform(step, tmp_path, recorder)
    assert result is StepStatus.NEEDGPUP
    children = list(root)
    assert [child.tag for child in children] == ["run"]
    assert children[0].get("file") == str(tmp_path / "installer.exe")
    assert children[0].get("arguments") == "--all"
    assert recorder.statuses == []


def test_outside_host_with_no_arguments_uses_empty_string(tmp_path):
    step = RunStep("installer.exe", None, True, "")
    _result, root = _perform(step, tmp_path, _Recorder())
    assert root[0].get("arguments") == ""


def test_parent_directory_is_refused(tmp_path):
    step = RunStep("../evil.exe", "", False, "")
    recorder = _Recorder(answer=True)
    result, root = _perform(step, tmp_path, recorder)
    assert result is StepStatus.FAIL
    assert recorder.messages == [SANDBOX_MESSAGE]
    assert recorder.statuses == ["Running ../evil.exe"]
    assert len(root) == 0


def test_validated_program_is_run(tmp_path, script, verdict_server):
    _server, url = verdict_server
    step = RunStep(script.name, "--quiet now", False, url)
    recorder = _Recorder()
    result, _root = _perform(step, tmp_path, recorder)
    assert result is StepStatus.SUCCESS
    assert (tmp_path / "marker.txt").read_text() == "--quiet now"
    assert recorder.questions == []
    assert recorder.messages == [COMPLETED_MESSAGE]


def test_banned_program_declined_is_not_run(tmp_path, script, verdict_server):
    server, url = verdict_server
    server.verdict = b"banned"
    step = RunStep(script.name, "", False, url)
    recorder = _Recorder(answer=False)
    result, _root = _perform(step, tmp_path, recorder)
    assert result is StepStatus.FAIL
    assert not (tmp_path / "marker.txt").exists()
    assert len(recorder.questions) == 1
    assert "NOT recommended you EXECUTE" in recorder.questions[0]
    assert script.name in recorder.questions[0]


def test_unknown_program_declined_when_service_unreachable(tmp_path, script):
    step = RunStep(script.name, "", False, "http://127.0.0.1:1/validate/")
    recorder = _Recorder(answer=False)
    result, _root = _perform(step, tmp_path, recorder)
    assert result is StepStatus.FAIL
    assert len(recorder.questions) == 1
    assert "highly not recommended" in recorder.questions[0]


def test_missing_program_accepted_by_user_fails_to_start(tmp_path):
    step = RunStep("absent.exe", "", False, "http://127.0.0.1:1/validate/")
    recorder = _Recorder(answer=True)
    result, _root = _perform(step, tmp_path, recorder)
    assert result is StepStatus.FAIL
    assert recorder.messages == []


def test_replace_variables_expands_file_and_arguments():
    variables = VariableHandler()
    variables.set_variable("NAME", "setup.exe")
    variables.set_variable("DIR", "plugins")
    step = RunStep("$NAME$", "/D=$DIR$", False, "")
    step.replace_variables(variables)
    assert step.file == "setup.exe"
    assert step.arguments == "/D=plugins"