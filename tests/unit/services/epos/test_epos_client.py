import json
import re
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from pos_bridge.core.enums import ResponseOutcome
from pos_bridge.core.exceptions import ConfigurationError, RemoteRejected, TransportFailure, UnparsableResponse
from pos_bridge.services.epos.client import EposClient, create_epos_client

LINE_PATTERN = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{6}\] #outgoing ")


@pytest.fixture
def client(sync_log):
    return EposClient(token="test-token", sync_log=sync_log, base_url="https://api.example.test/api/V2/")


@pytest.fixture
def mock_http(mocker):
    """Patch httpx.AsyncClient and return the mocked request coroutine"""
    mock_client = mocker.patch("pos_bridge.services.epos.client.httpx.AsyncClient")
    request = AsyncMock()
    mock_client.return_value.__aenter__.return_value.request = request
    return request


def _response(status_code=200, body=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    response.text = text if text is not None else json.dumps(body)
    return response


def _messages(lines):
    """Timestamped lines only, without the timestamp; JSON bodies continue on untagged lines"""
    return [line.split("] ", 1)[1] for line in lines if LINE_PATTERN.match(line)]


def test_client_requires_token(sync_log):
    with pytest.raises(ConfigurationError):
        EposClient(token="", sync_log=sync_log)


@pytest.mark.asyncio
async def test_send_ok(client, mock_http, read_sync_log):
    mock_http.return_value = _response(200, {"CustomerID": 77})

    response = await client.get_customer(77)

    assert response.outcome == ResponseOutcome.OK
    assert response.ok
    assert response.get("CustomerID") == 77

    kwargs = mock_http.call_args.kwargs
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == "https://api.example.test/api/V2/Customer/77"
    assert kwargs["headers"]["Authorization"] == "Basic test-token"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert kwargs["content"] == "{}"

    lines = read_sync_log()
    assert all(LINE_PATTERN.match(line) for line in lines)
    assert _messages(lines) == [
        "#outgoing Requesting {GET} https://api.example.test/api/V2/Customer/77",
        "#outgoing Response OK!",
    ]


@pytest.mark.asyncio
async def test_send_logs_request_body(client, mock_http, read_sync_log):
    mock_http.return_value = _response(201, {"CustomerAddressID": 5})

    await client.create_customer_address({"CustomerID": "77", "Town": "Leeds"})

    assert json.loads(mock_http.call_args.kwargs["content"]) == {"CustomerID": "77", "Town": "Leeds"}
    messages = _messages(read_sync_log())
    assert messages[0] == "#outgoing Requesting {POST} https://api.example.test/api/V2/CustomerAddress/ with params:"
    assert messages[1] == "#outgoing {"
    assert messages[-1] == "#outgoing Response OK!"


@pytest.mark.asyncio
async def test_send_rejected_keeps_body(client, mock_http, read_sync_log):
    mock_http.return_value = _response(400, {"Message": "Invalid CustomerID"})

    response = await client.update_customer(77, {"MainAddressID": 5})

    assert response.outcome == ResponseOutcome.REJECTED
    assert response.status_code == 400
    assert response.body == {"Message": "Invalid CustomerID"}
    assert response.data is None
    assert response.get("Message") is None
    with pytest.raises(RemoteRejected) as exc_info:
        response.raise_for_status()
    assert exc_info.value.status_code == 400

    messages = _messages(read_sync_log())
    assert "#outgoing Response ERR: 400!" in messages
    assert any(message.startswith("#outgoing ERR: {") for message in messages)


@pytest.mark.asyncio
async def test_send_unparsable(client, mock_http, read_sync_log):
    mock_http.return_value = _response(200, ValueError("not json"), text="<html>oops</html>")

    response = await client.get_customer(77)

    assert response.outcome == ResponseOutcome.UNPARSABLE
    assert response.text == "<html>oops</html>"
    with pytest.raises(UnparsableResponse):
        response.raise_for_status()
    assert _messages(read_sync_log())[-1] == "#outgoing Failed to JSON parse response: <html>oops</html>"


@pytest.mark.asyncio
async def test_send_transport_failure(client, mock_http, read_sync_log):
    mock_http.side_effect = httpx.ConnectError("Connection refused")

    response = await client.delete_customer(77)

    assert response.outcome == ResponseOutcome.TRANSPORT_FAILED
    assert response.status_code is None
    with pytest.raises(TransportFailure):
        response.raise_for_status()
    assert _messages(read_sync_log())[-1] == "#outgoing Request failed: Connection refused"


@pytest.mark.asyncio
@pytest.mark.parametrize("page, expected_url", [
    (0, "https://api.example.test/api/V2/ProductStock/"),
    (3, "https://api.example.test/api/V2/ProductStock/?page=3"),
])
async def test_stock_page_endpoint(client, mock_http, page, expected_url):
    mock_http.return_value = _response(200, [])

    await client.get_stock_page(page)

    assert mock_http.call_args.kwargs["url"] == expected_url


@pytest.mark.asyncio
async def test_create_epos_client_reads_token_from_store(store, settings, sync_log):
    await store.set_config_value(settings.EPOS_TOKEN_CONFIG_KEY, "stored-token")

    client = await create_epos_client(store, settings, sync_log)

    assert client._get_headers()["Authorization"] == "Basic stored-token"


@pytest.mark.asyncio
async def test_create_epos_client_falls_back_to_settings(store, settings, sync_log):
    client = await create_epos_client(store, settings, sync_log)

    assert client._get_headers()["Authorization"] == "Basic test-token"


@pytest.mark.asyncio
async def test_create_epos_client_without_token(store, settings, sync_log):
    settings = settings.model_copy(update={"EPOS_API_TOKEN": None})

    with pytest.raises(ConfigurationError):
        await create_epos_client(store, settings, sync_log)
