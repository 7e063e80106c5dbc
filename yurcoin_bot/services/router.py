from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..prize.coordinator import DrawCoordinator, NoAssets, Outcome, Throttled, Won


BUTTON_TRY_MY_LUCK = "Try My Luck"
BUTTON_BALANCE = "Balance"

CMD_START = "start"
CMD_DRAW = "draw"
CMD_BALANCE = "balance"

MSG_WELCOME = "Welcome to YurCoinBot! Choose an action:"
MSG_NO_IMAGES = "No images found. Please check images.env."
MSG_USE_BUTTONS = "Please use the buttons below."


@dataclass(frozen=True)
class Reply:
    text: str
    photo: Optional[Path] = None


def parse_command(text: str) -> Optional[str]:
    if not isinstance(text, str):
        return None
    if text == "/start":
        return CMD_START
    if text == BUTTON_TRY_MY_LUCK:
        return CMD_DRAW
    if text == BUTTON_BALANCE:
        return CMD_BALANCE
    return None


def draw_reply(outcome: Outcome) -> Reply:
    if isinstance(outcome, Throttled):
        return Reply(f"Please wait {outcome.remaining_seconds} seconds.")
    if isinstance(outcome, NoAssets):
        return Reply(MSG_NO_IMAGES)
    if isinstance(outcome, Won):
        return Reply(f"You won {outcome.value} YC. Balance: {outcome.new_balance} YC.", photo=outcome.asset)
    raise TypeError(f"unknown draw outcome: {outcome!r}")


def balance_reply(balance: int) -> Reply:
    return Reply(f"Your balance: {balance} YC")


class Router:
    """Turns one inbound chat message into one Reply."""

    def __init__(self, coordinator: DrawCoordinator):
        self.coordinator = coordinator

    def handle(self, user_id: int, text: str, now: float) -> Reply:
        cmd = parse_command(text)
        if cmd == CMD_START:
            return Reply(MSG_WELCOME)
        if cmd == CMD_DRAW:
            return draw_reply(self.coordinator.attempt_draw(user_id, now))
        if cmd == CMD_BALANCE:
            return balance_reply(self.coordinator.query_balance(user_id))
        return Reply(MSG_USE_BUTTONS)
