from xml.etree.ElementTree import Element

from pminstall.steps import CancelToken, Host, InstallStep, StepStatus


def test_cancel_token_starts_clear():
    assert CancelToken().is_signalled() is False


def test_cancel_token_trigger():
    token = CancelToken()
    token.trigger_cancel()
    assert token.is_signalled() is True


def test_cancel_token_shared_between_holders():
    token = CancelToken()
    holders = [token, token]
    holders[0].trigger_cancel()
    assert holders[1].is_signalled() is True


def test_host_confirm_uses_callback():
    questions = []

    def ask(message):
        questions.append(message)
        return True

    assert Host(ask=ask).confirm("Copy anyway?") is True
    assert questions == ["Copy anyway?"]


def test_host_confirm_defaults_to_no():
    assert Host().confirm("Copy anyway?") is False


def test_host_inform_uses_callback():
    messages = []
    Host(notify=messages.append).inform("done")
    assert messages == ["done"]


def test_host_inform_default_writes_stderr(capsys):
    Host(title="PM").inform("finished")
    assert "PM: finished" in capsys.readouterr().err


def test_base_step_succeeds():
    step = InstallStep()
    status = step.perform("/tmp", Element("install"), lambda s: None,
                          lambda p: None, Host(), CancelToken())
    assert status is StepStatus.SUCCESS