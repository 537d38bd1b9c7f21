from unittest.mock import patch

import pytest

from vault_depositor.account import PROMPT_TEXT, parse_private_key, prompt_account
from vault_depositor.exceptions import SigningKeyError

TEST_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


@pytest.mark.parametrize("raw", [TEST_KEY, f"0x{TEST_KEY}", f"  {TEST_KEY}\n"])
def test_parse_private_key_derives_address(raw):
    assert parse_private_key(raw).address == TEST_ADDRESS


@pytest.mark.parametrize("raw", ["", "   ", "zz" * 32, TEST_KEY[:-2]])
def test_malformed_key_is_rejected_without_echo(raw):
    with pytest.raises(SigningKeyError) as exc_info:
        parse_private_key(raw)

    assert exc_info.value.__cause__ is None
    if raw.strip():
        assert raw.strip() not in str(exc_info.value)


def test_prompt_hides_input():
    with patch("vault_depositor.account.typer.prompt", return_value=TEST_KEY) as prompt:
        account = prompt_account()

    prompt.assert_called_once_with(PROMPT_TEXT, hide_input=True)
    assert account.address == TEST_ADDRESS
