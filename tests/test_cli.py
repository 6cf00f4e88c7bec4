import io
import json

from codecollab import cli as cli_mod
from codecollab.core.feedback import (
    CallbackFeedbackChannel,
    CollectingFeedbackChannel,
    FeedbackEvent,
    FeedbackType,
)
from codecollab.core.session_store import SessionStore


def _config(tmp_path, data=None):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data or {"state_dir": str(tmp_path / "state")}), encoding="utf-8")
    return str(path)


def _clear_env(monkeypatch):
    for name in ("OPENAI_API_KEY", "CODECOLLAB_MODEL", "CODECOLLAB_POLL_INTERVAL"):
        monkeypatch.delenv(name, raising=False)


def test_files_command_lists_workspace(tmp_path, capsys, monkeypatch):
    _clear_env(monkeypatch)
    ws = tmp_path / "ws"
    (ws / "src").mkdir(parents=True)
    (ws / "src" / "main.py").write_text("", encoding="utf-8")
    (ws / "README.md").write_text("", encoding="utf-8")

    code = cli_mod.main(["--dir", str(ws), "--config", _config(tmp_path), "files"])

    assert code == 0
    assert capsys.readouterr().out.splitlines() == ["README.md", "src/main.py"]


def test_tree_command_prints_json(tmp_path, capsys, monkeypatch):
    _clear_env(monkeypatch)
    ws = tmp_path / "ws"
    ws.mkdir()
    (ws / "a.txt").write_text("abc", encoding="utf-8")

    code = cli_mod.main(["--dir", str(ws), "--config", _config(tmp_path), "tree"])

    data = json.loads(capsys.readouterr().out)
    assert code == 0
    assert data["files"][0]["name"] == "a.txt"
    assert data["files"][0]["size"] == 3


def test_reset_forgets_stored_session(tmp_path, capsys, monkeypatch):
    _clear_env(monkeypatch)
    ws = (tmp_path / "ws")
    ws.mkdir()
    store = SessionStore(storage_dir=tmp_path / "state")
    session = store.get(ws.resolve())
    session.thread_id = "thread_1"
    store.save(session)

    code = cli_mod.main(["--dir", str(ws), "--config", _config(tmp_path), "reset"])

    assert code == 0
    assert "Forgot session" in capsys.readouterr().out
    assert SessionStore(storage_dir=tmp_path / "state").get(ws.resolve()).thread_id is None


def test_ask_without_api_key_is_config_error(tmp_path, capsys, monkeypatch):
    _clear_env(monkeypatch)
    ws = tmp_path / "ws"
    ws.mkdir()

    code = cli_mod.main(["--dir", str(ws), "--config", _config(tmp_path), "ask", "hello"])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_invalid_config_file_exits_2(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    bad = tmp_path / "config.json"
    bad.write_text("{nope", encoding="utf-8")

    assert cli_mod.main(["--dir", str(tmp_path), "--config", str(bad), "files"]) == 2


def test_ask_exit_code_follows_turn_outcome(tmp_path, monkeypatch):
    _clear_env(monkeypatch)

    class StubOrchestrator:
        def __init__(self, ok):
            self.ok = ok
            self.requests = []

        async def handle_prompt(self, request):
            self.requests.append(request)
            return type("Result", (), {"ok": self.ok})()

    stub = StubOrchestrator(ok=False)
    monkeypatch.setattr(cli_mod, "_build_orchestrator", lambda args, settings: stub)

    code = cli_mod.main(["--config", _config(tmp_path), "ask", "fix", "--file", "app.js"])

    assert code == 1
    assert stub.requests[0].text == "fix"
    assert stub.requests[0].file_path == "app.js"

    stub.ok = True
    assert cli_mod.main(["--config", _config(tmp_path), "ask", "fix"]) == 0


def test_parse_chat_line():
    plain = cli_mod._parse_chat_line("make a todo app")
    assert plain.text == "make a todo app" and plain.file_path is None

    targeted = cli_mod._parse_chat_line("/file src/app.js add error handling")
    assert targeted.file_path == "src/app.js"
    assert targeted.text == "add error handling"


def test_console_renderer_output():
    out = io.StringIO()
    render = cli_mod.ConsoleRenderer(stream=out, color=False)

    render(FeedbackEvent(FeedbackType.ACTION, "Folder created: /ws/src"))
    render(FeedbackEvent(FeedbackType.ACTION, "createFile 'x' failed", ok=False))
    render(FeedbackEvent(FeedbackType.SUMMARY, "done"))
    render(FeedbackEvent(FeedbackType.ERROR, "No JSON found", ok=False, detail="raw reply"))

    lines = out.getvalue().splitlines()
    assert lines == [
        "  ✔ Folder created: /ws/src",
        "  ✖ createFile 'x' failed",
        "AI ▸ done",
        "Error: No JSON found",
        "raw reply",
    ]


def test_callback_channel_swallows_renderer_errors():
    def broken(event):
        raise RuntimeError("terminal closed")

    channel = CallbackFeedbackChannel(broken)
    channel.summary("still fine")  # must not raise


def test_feedback_event_to_dict():
    channel = CollectingFeedbackChannel()
    channel.error("bad", detail="raw")
    channel.action("ok", path="/ws/a")

    assert channel.events[0].to_dict() == {"type": "error", "content": "bad", "ok": False, "detail": "raw"}
    assert channel.events[1].to_dict() == {"type": "action", "content": "ok", "path": "/ws/a"}
    assert channel.events[0].is_terminal and not channel.events[1].is_terminal
