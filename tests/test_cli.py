import pytest

from scripts.groupsync import cli
from scripts.groupsync.models import Group
from scripts.groupsync.okta import OktaApiError
from scripts.groupsync.synchronizer import DirectInvocation, Response

from conftest import make_config


@pytest.fixture(autouse=True)
def _config(monkeypatch):
    monkeypatch.setattr(cli, "load_config", lambda: make_config(target_groups=("Engineers",)))


def test_sync_prints_result(monkeypatch, capsys):
    seen = {}

    def fake_handle(mode, config):
        seen["mode"] = mode
        seen["store"] = config.store_on_request
        return Response(200, '[{"email": "a@x.com", "group": "Engineers"}]')

    monkeypatch.setattr(cli, "handle_invocation", fake_handle)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync"])

    assert excinfo.value.code == 0
    assert seen == {"mode": DirectInvocation(), "store": False}
    assert '"a@x.com"' in capsys.readouterr().out


def test_sync_store_flag_enables_persistence(monkeypatch):
    seen = {}

    def fake_handle(mode, config):
        seen["store"] = config.store_on_request
        return Response(200, "[]")

    monkeypatch.setattr(cli, "handle_invocation", fake_handle)

    with pytest.raises(SystemExit):
        cli.main(["sync", "--store"])
    assert seen["store"] is True


def test_sync_provider_error_exits_non_zero(monkeypatch, capsys):
    monkeypatch.setattr(
        cli, "handle_invocation", lambda mode, config: Response(401, '{"error": "denied"}')
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync"])

    assert excinfo.value.code == 1
    assert "denied" in capsys.readouterr().out


def test_groups_marks_targets(monkeypatch, capsys):
    class FakeClient:
        def __init__(self, config):
            pass

        def list_groups(self):
            return [Group("Everyone", "https://x/1"), Group("Engineers", "https://x/2")]

    monkeypatch.setattr(cli, "OktaClient", FakeClient)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["groups"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.splitlines() == ["  Everyone", "* Engineers"]


def test_groups_provider_error(monkeypatch):
    class FailingClient:
        def __init__(self, config):
            pass

        def list_groups(self):
            raise OktaApiError(403, {"errorSummary": "forbidden"})

    monkeypatch.setattr(cli, "OktaClient", FailingClient)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["groups"])
    assert excinfo.value.code == 1


def test_unexpected_error_exits_non_zero(monkeypatch):
    def broken(mode, config):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "handle_invocation", broken)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync"])
    assert excinfo.value.code == 1


def test_command_is_required():
    with pytest.raises(SystemExit) as excinfo:
        cli.build_parser().parse_args([])
    assert excinfo.value.code == 2
