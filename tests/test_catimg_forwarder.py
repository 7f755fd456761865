"""Tests for the catimg prompt hand-off."""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from spellbook.exceptions import ExternalAppError
from spellbook.implementations.catimg_forwarder import CHECKER_USER_AGENT, CatimgForwarder
from spellbook.interfaces.prompt_forwarder import REASON_NOT_INSTALLED, REASON_PROMPT_SAVED


APP_URL = "https://catimg.example.test/"
STORE_URL = "lzc://appstore?path=detail/catimg"


@pytest.fixture
def forwarder(tmp_path):
    return CatimgForwarder(
        app_url=APP_URL,
        store_url=STORE_URL,
        prompt_file=str(tmp_path / ".catimg_prompt.json"),
        timeout=1
    )


def mock_http_client(mock_client_class, status_ok=True, body="<html>catimg</html>", error=None):
    mock_response = MagicMock()
    mock_response.is_success = status_ok
    mock_response.text = body

    mock_instance = AsyncMock()
    if error is not None:
        mock_instance.get = AsyncMock(side_effect=error)
    else:
        mock_instance.get.return_value = mock_response
    mock_instance.__aenter__.return_value = mock_instance
    # __aexit__ must return None to not suppress exceptions
    mock_instance.__aexit__.return_value = None
    mock_client_class.return_value = mock_instance
    return mock_instance


@pytest.mark.asyncio
async def test_forward_writes_prompt_when_installed(forwarder):
    with patch('httpx.AsyncClient') as mock_client_class:
        mock_instance = mock_http_client(mock_client_class)

        result = await forwarder.forward("  a tabby cat  ")

    assert result.reason == REASON_PROMPT_SAVED
    assert result.redirect_url == APP_URL

    payload = json.loads(forwarder.prompt_file.read_text(encoding="utf-8"))
    assert payload["prompt"] == "a tabby cat"
    assert isinstance(payload["timestamp"], int)

    call_args = mock_instance.get.call_args
    assert call_args[0][0] == APP_URL
    assert call_args[1]["headers"]["User-Agent"] == CHECKER_USER_AGENT


@pytest.mark.asyncio
async def test_forward_non_ascii_prompt(forwarder):
    with patch('httpx.AsyncClient') as mock_client_class:
        mock_http_client(mock_client_class)
        await forwarder.forward("橘猫")

    assert '"橘猫"' in forwarder.prompt_file.read_text(encoding="utf-8")


@pytest.mark.asyncio
@pytest.mark.parametrize("kwargs", [
    {"status_ok": False},
    {"body": "<html><title>无法打开</title></html>"},
    {"body": "<p>应用未安装, 请前往应用商店安装</p>"},
    {"body": '<img src="/static/state_forbidden.svg">'},
    {"error": httpx.ConnectError("connection refused")},
    {"error": httpx.ReadTimeout("timed out")},
])
async def test_forward_redirects_to_store_when_not_installed(forwarder, kwargs):
    with patch('httpx.AsyncClient') as mock_client_class:
        mock_http_client(mock_client_class, **kwargs)

        result = await forwarder.forward("a cat")

    assert result.reason == REASON_NOT_INSTALLED
    assert result.redirect_url == STORE_URL
    assert not forwarder.prompt_file.exists()


@pytest.mark.asyncio
async def test_forward_write_failure_raises(tmp_path):
    forwarder = CatimgForwarder(
        app_url=APP_URL,
        store_url=STORE_URL,
        prompt_file=str(tmp_path / "missing-dir" / ".catimg_prompt.json")
    )

    with patch('httpx.AsyncClient') as mock_client_class:
        mock_http_client(mock_client_class)

        with pytest.raises(ExternalAppError):
            await forwarder.forward("a cat")
