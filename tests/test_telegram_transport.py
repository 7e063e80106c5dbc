import json

import pytest
import requests

from yurcoin_bot.services import telegram_transport as tt
from yurcoin_bot.services.telegram_transport import (
    TelegramTransport,
    TransportError,
    main_keyboard,
    parse_update,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_main_keyboard_layout():
    kb = main_keyboard()
    assert kb["keyboard"] == [[{"text": "Try My Luck"}, {"text": "Balance"}]]
    assert kb["is_persistent"] is True
    assert kb["resize_keyboard"] is True
    assert kb["one_time_keyboard"] is False


def test_parse_update():
    assert parse_update({"update_id": 5, "message": {"chat": {"id": 42}, "text": "Balance"}}) == (5, 42, "Balance")
    assert parse_update({"update_id": 6, "message": {"chat": {"id": 42}, "photo": []}}) == (6, 42, "")
    assert parse_update({"update_id": 7, "edited_message": {}}) is None
    assert parse_update({"message": {"chat": {"id": 1}}}) is None


def test_get_updates_success(monkeypatch):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen.update(url=url, params=params, timeout=timeout)
        return FakeResponse(payload={"ok": True, "result": [{"update_id": 1}, "junk"]})

    monkeypatch.setattr(tt.requests, "get", fake_get)
    t = TelegramTransport("123:abc", api_base="https://example.test/")

    assert t.get_updates(10, timeout_s=5) == [{"update_id": 1}]
    assert seen["url"] == "https://example.test/bot123:abc/getUpdates"
    assert seen["params"]["offset"] == 10
    assert seen["params"]["timeout"] == 5
    assert seen["timeout"] == 15.0


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=401, text="Unauthorized"),
    FakeResponse(payload={"ok": False, "description": "Conflict"}),
    FakeResponse(payload=None),
])
def test_get_updates_failures_raise(monkeypatch, response):
    monkeypatch.setattr(tt.requests, "get", lambda *a, **k: response)
    with pytest.raises(TransportError):
        TelegramTransport("t").get_updates(0)


def test_get_updates_network_error_raises(monkeypatch):
    def boom(*a, **k):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(tt.requests, "get", boom)
    with pytest.raises(TransportError, match="ConnectionError"):
        TelegramTransport("t").get_updates(0)


def test_send_message_posts_keyboard(monkeypatch):
    seen = {}

    def fake_post(url, data=None, files=None, timeout=None):
        seen.update(url=url, data=data, files=files)
        return FakeResponse()

    monkeypatch.setattr(tt.requests, "post", fake_post)

    ok, err = TelegramTransport("t").send_message(42, "hi", keyboard=main_keyboard())

    assert (ok, err) == (True, "")
    assert seen["url"].endswith("/bott/sendMessage")
    assert seen["data"]["chat_id"] == 42
    assert json.loads(seen["data"]["reply_markup"]) == main_keyboard()
    assert seen["files"] is None


def test_send_photo_uploads_file(monkeypatch, tmp_path):
    img = tmp_path / "YurCoin10.png"
    img.write_bytes(b"\x89PNG")
    seen = {}

    def fake_post(url, data=None, files=None, timeout=None):
        name, fh = files["photo"]
        seen.update(url=url, data=data, name=name, body=fh.read())
        return FakeResponse()

    monkeypatch.setattr(tt.requests, "post", fake_post)

    ok, _ = TelegramTransport("t").send_photo(7, img, caption="You won 10 YC.")

    assert ok
    assert seen["url"].endswith("/sendPhoto")
    assert seen["data"]["caption"] == "You won 10 YC."
    assert seen["name"] == "YurCoin10.png"
    assert seen["body"] == b"\x89PNG"


def test_send_photo_missing_file(tmp_path):
    ok, err = TelegramTransport("t").send_photo(7, tmp_path / "gone.png")
    assert not ok
    assert "FileNotFoundError" in err


def test_send_reports_http_error(monkeypatch):
    monkeypatch.setattr(tt.requests, "post", lambda *a, **k: FakeResponse(status_code=400, text="Bad Request"))
    ok, err = TelegramTransport("t").send_message(1, "x")
    assert not ok
    assert err.startswith("HTTP 400")
