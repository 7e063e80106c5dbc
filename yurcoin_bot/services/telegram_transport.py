import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests

from .router import BUTTON_BALANCE, BUTTON_TRY_MY_LUCK


DEFAULT_API_BASE = "https://api.telegram.org"


class TransportError(RuntimeError):
    pass


def main_keyboard() -> Dict[str, Any]:
    """Persistent two-button reply keyboard."""
    return {
        "keyboard": [[{"text": BUTTON_TRY_MY_LUCK}, {"text": BUTTON_BALANCE}]],
        "is_persistent": True,
        "resize_keyboard": True,
        "one_time_keyboard": False,
    }


def parse_update(update: Dict[str, Any]) -> Optional[Tuple[int, int, str]]:
    """(update_id, chat_id, text) for a message update, else None."""
    try:
        update_id = int(update["update_id"])
    except (KeyError, TypeError, ValueError):
        return None
    msg = update.get("message")
    if not isinstance(msg, dict):
        return None
    chat = msg.get("chat") or {}
    try:
        chat_id = int(chat["id"])
    except (KeyError, TypeError, ValueError):
        return None
    text = msg.get("text")
    return update_id, chat_id, text if isinstance(text, str) else ""


def _error_text(r: requests.Response) -> str:
    body = getattr(r, "text", "") or ""
    return f"HTTP {r.status_code}: {body[:180]}"


class TelegramTransport:
    """
    Minimal Bot API client:
      https://api.telegram.org/bot{token}/{method}
    """

    def __init__(self, token: str, api_base: str = DEFAULT_API_BASE, timeout_s: float = 10.0):
        self.token = token
        self.api_base = (api_base or DEFAULT_API_BASE).rstrip("/")
        self.timeout_s = timeout_s

    def _url(self, method: str) -> str:
        return f"{self.api_base}/bot{self.token}/{method}"

    def get_updates(self, offset: int, timeout_s: int = 30) -> List[Dict[str, Any]]:
        params = {"offset": offset, "timeout": timeout_s, "allowed_updates": json.dumps(["message"])}
        try:
            r = requests.get(self._url("getUpdates"), params=params, timeout=timeout_s + self.timeout_s)
        except requests.RequestException as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e
        if r.status_code != 200:
            raise TransportError(_error_text(r))
        try:
            data = r.json()
        except ValueError as e:
            raise TransportError(f"invalid JSON from getUpdates: {e}") from e
        if not data.get("ok"):
            raise TransportError(str(data.get("description") or "getUpdates failed"))
        result = data.get("result") or []
        return [u for u in result if isinstance(u, dict)]

    def _post(self, method: str, data: Dict[str, Any], files: Optional[Dict[str, Any]] = None) -> Tuple[bool, str]:
        try:
            r = requests.post(self._url(method), data=data, files=files, timeout=self.timeout_s)
            if r.status_code == 200:
                return True, ""
            return False, _error_text(r)
        except requests.RequestException as e:
            return False, f"{type(e).__name__}: {e}"

    def send_message(self, chat_id: int, text: str, keyboard: Optional[Dict[str, Any]] = None) -> Tuple[bool, str]:
        data: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if keyboard:
            data["reply_markup"] = json.dumps(keyboard)
        return self._post("sendMessage", data)

    def send_photo(
        self,
        chat_id: int,
        photo: Path,
        caption: str = "",
        keyboard: Optional[Dict[str, Any]] = None,
    ) -> Tuple[bool, str]:
        data: Dict[str, Any] = {"chat_id": chat_id, "caption": caption}
        if keyboard:
            data["reply_markup"] = json.dumps(keyboard)
        try:
            with Path(photo).open("rb") as f:
                return self._post("sendPhoto", data, files={"photo": (Path(photo).name, f)})
        except OSError as e:
            return False, f"{type(e).__name__}: {e}"
