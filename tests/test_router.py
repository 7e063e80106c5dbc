from yurcoin_bot.services.router import (
    BUTTON_BALANCE,
    BUTTON_TRY_MY_LUCK,
    MSG_NO_IMAGES,
    MSG_USE_BUTTONS,
    MSG_WELCOME,
    Reply,
    Router,
    parse_command,
)


def test_parse_command():
    assert parse_command("/start") == "start"
    assert parse_command(BUTTON_TRY_MY_LUCK) == "draw"
    assert parse_command(BUTTON_BALANCE) == "balance"
    assert parse_command("balance") is None
    assert parse_command(None) is None


def test_start_and_unknown_text(coordinator):
    router = Router(coordinator)
    assert router.handle(1, "/start", 0.0) == Reply(MSG_WELCOME)
    assert router.handle(1, "hello", 0.0) == Reply(MSG_USE_BUTTONS)
    assert router.handle(1, "", 0.0) == Reply(MSG_USE_BUTTONS)


def test_draw_replies(coordinator, write_manifest, data_dir):
    router = Router(coordinator)
    write_manifest("YurCoin10.png")

    won = router.handle(42, BUTTON_TRY_MY_LUCK, 0.0)
    assert won == Reply("You won 10 YC. Balance: 10 YC.", photo=data_dir / "YurCoin10.png")

    assert router.handle(42, BUTTON_TRY_MY_LUCK, 2.0) == Reply("Please wait 3 seconds.")
    assert router.handle(42, BUTTON_BALANCE, 2.5) == Reply("Your balance: 10 YC")


def test_no_images_reply(coordinator):
    router = Router(coordinator)
    assert router.handle(1, BUTTON_TRY_MY_LUCK, 0.0) == Reply(MSG_NO_IMAGES)


def test_balance_for_new_user_is_zero(coordinator):
    assert Router(coordinator).handle(77, BUTTON_BALANCE, 0.0) == Reply("Your balance: 0 YC")
