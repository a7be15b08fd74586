"""
Tests del cliente Airwallex contra un servidor falso en memoria.

Cubre:
- paginacion completa y en orden del servidor
- renovacion del token a mitad de la paginacion (exactamente dos logins)
- backoff ante 429 / 5xx y reintento tras 401
- resultados parciales en PageFetchError
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from akemisflow.infrastructure.external.airwallex_sync import airwallex_client
from akemisflow.infrastructure.external.airwallex_sync.airwallex_client import (
    AirwallexClient,
    AirwallexCredentials,
    AuthSession,
)
from akemisflow.shared.exceptions.sync import AuthenticationError, PageFetchError


_INVALID_JSON = object()


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, headers: dict | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = "" if payload is None else str(payload)

    def json(self) -> Any:
        if self._payload is _INVALID_JSON:
            raise ValueError("invalid json")
        return self._payload


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 12, 16, 10, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class _FakeAirwallexHttp:
    """
    Simula login + listados paginados.

    pages: cursor (None para la primera) -> respuesta o lista de respuestas
    (se consumen en orden para simular fallos transitorios).
    """

    def __init__(self, pages: dict[str | None, Any] | None = None, login: _FakeResponse | None = None) -> None:
        self.pages = pages or {}
        self.login_response = login or _FakeResponse(200, {"token": "tok", "expires_in": 1800})
        self.login_count = 0
        self.get_calls: list[dict[str, Any]] = []
        self.on_get = None

    def request(self, method, url, params=None, headers=None, timeout=None):
        if method == "POST":
            assert url.endswith("/api/v1/authentication/login")
            assert headers["x-client-id"] == "client"
            assert headers["x-api-key"] == "secret"
            self.login_count += 1
            return self.login_response

        params = params or {}
        self.get_calls.append({"url": url, "params": dict(params), "headers": dict(headers or {})})
        key = params.get("cursor") if "limit" in params else url
        if self.on_get:
            self.on_get(key)
        response = self.pages[key]
        if isinstance(response, list):
            return response.pop(0)
        return response


def _page(items: list[dict], next_cursor: str | None = None) -> _FakeResponse:
    return _FakeResponse(200, {"items": items, "has_more": next_cursor is not None, "next_cursor": next_cursor})


def _client(http: _FakeAirwallexHttp, clock: _Clock | None = None, **kwargs) -> AirwallexClient:
    return AirwallexClient(
        AirwallexCredentials(client_id="client", api_key="secret"),
        session=http,
        base_url="https://api.test",
        clock=clock or _Clock(),
        **kwargs,
    )


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr(airwallex_client.time, "sleep", lambda seconds: recorded.append(seconds))
    return recorded


def test_fetch_all_returns_every_item_across_pages_in_order() -> None:
    http = _FakeAirwallexHttp(
        pages={
            None: _page([{"id": "a"}, {"id": "b"}], next_cursor="c1"),
            "c1": _page([{"id": "c"}], next_cursor="c2"),
            "c2": _page([{"id": "d"}, {"id": "e"}]),
        }
    )
    items = _client(http, page_size=2).fetch_all("beneficiaries")

    assert [i["id"] for i in items] == ["a", "b", "c", "d", "e"]
    assert [c["params"].get("cursor") for c in http.get_calls] == [None, "c1", "c2"]
    assert all(c["params"]["limit"] == 2 for c in http.get_calls)
    assert http.get_calls[0]["url"] == "https://api.test/api/v1/beneficiaries"
    assert http.get_calls[0]["headers"]["Authorization"] == "Bearer tok"
    assert http.get_calls[0]["headers"]["x-api-version"] == "2020-09-22"
    assert http.login_count == 1


def test_token_expiring_mid_pagination_reauthenticates_once_without_restarting() -> None:
    clock = _Clock()
    http = _FakeAirwallexHttp(
        pages={
            None: _page([{"id": "a"}], next_cursor="c1"),
            "c1": _page([{"id": "b"}]),
        }
    )

    def _expire_after_first_page(cursor):
        if cursor is None:
            clock.advance(minutes=31)

    http.on_get = _expire_after_first_page
    items = _client(http, clock=clock).fetch_all("beneficiaries")

    assert [i["id"] for i in items] == ["a", "b"]
    assert http.login_count == 2
    assert [c["params"].get("cursor") for c in http.get_calls] == [None, "c1"]


def test_auth_session_expiry_includes_safety_margin() -> None:
    clock = _Clock()
    http = _FakeAirwallexHttp(login=_FakeResponse(200, {"token": "tok", "expires_at": "2025-12-16T10:30:00+0000"}))
    session = _client(http, clock=clock, token_margin_s=60).authenticate()

    assert session.expires_at == datetime(2025, 12, 16, 10, 29, 0, tzinfo=timezone.utc)
    assert not session.is_expired(clock.now)
    assert session.is_expired(datetime(2025, 12, 16, 10, 29, 0, tzinfo=timezone.utc))


def test_ensure_authenticated_reuses_valid_session() -> None:
    http = _FakeAirwallexHttp()
    client = _client(http)

    first = client.ensure_authenticated()
    second = client.ensure_authenticated()

    assert isinstance(first, AuthSession)
    assert first is second
    assert http.login_count == 1


def test_missing_credentials_raise_authentication_error_without_calling_api() -> None:
    http = _FakeAirwallexHttp()
    client = AirwallexClient(AirwallexCredentials(client_id="", api_key=""), session=http)

    with pytest.raises(AuthenticationError):
        client.fetch_all("beneficiaries")
    assert http.login_count == 0
    assert http.get_calls == []


def test_rejected_login_raises_authentication_error_with_status() -> None:
    http = _FakeAirwallexHttp(login=_FakeResponse(401, {"message": "bad credentials"}))

    with pytest.raises(AuthenticationError) as exc_info:
        _client(http).authenticate()
    assert exc_info.value.status == 401


def test_login_without_token_raises_authentication_error() -> None:
    http = _FakeAirwallexHttp(login=_FakeResponse(200, {"expires_in": 1800}))

    with pytest.raises(AuthenticationError):
        _client(http).authenticate()


def test_page_failure_keeps_items_from_previous_pages() -> None:
    http = _FakeAirwallexHttp(
        pages={
            None: _page([{"id": "a"}, {"id": "b"}], next_cursor="c1"),
            "c1": _FakeResponse(400, {"message": "bad cursor"}),
        }
    )

    with pytest.raises(PageFetchError) as exc_info:
        _client(http).fetch_all("beneficiaries")
    assert exc_info.value.status == 400
    assert [i["id"] for i in exc_info.value.items] == ["a", "b"]


def test_rate_limit_honours_retry_after(sleeps: list[float]) -> None:
    http = _FakeAirwallexHttp(
        pages={None: [_FakeResponse(429, None, headers={"Retry-After": "2"}), _page([{"id": "a"}])]}
    )
    items = _client(http).fetch_all("beneficiaries")

    assert [i["id"] for i in items] == ["a"]
    assert sleeps == [2.0]


def test_server_errors_use_exponential_backoff(sleeps: list[float]) -> None:
    http = _FakeAirwallexHttp(
        pages={None: [_FakeResponse(503), _FakeResponse(502), _page([{"id": "a"}])]}
    )
    items = _client(http, min_backoff_s=0.8).fetch_all("beneficiaries")

    assert len(items) == 1
    assert sleeps == [pytest.approx(0.92), pytest.approx(1.84)]


def test_server_errors_exhaust_retries_as_page_fetch_error(sleeps: list[float]) -> None:
    http = _FakeAirwallexHttp(pages={None: [_FakeResponse(500) for _ in range(3)]})

    with pytest.raises(PageFetchError) as exc_info:
        _client(http, max_retries=2).fetch_all("beneficiaries")
    assert exc_info.value.status == 500
    assert exc_info.value.items == []
    assert len(sleeps) == 2


def test_unauthorized_page_renews_token_and_retries_once() -> None:
    http = _FakeAirwallexHttp(pages={None: [_FakeResponse(401), _page([{"id": "a"}])]})
    items = _client(http).fetch_all("beneficiaries")

    assert [i["id"] for i in items] == ["a"]
    assert http.login_count == 2


def test_repeated_cursor_stops_pagination() -> None:
    http = _FakeAirwallexHttp(
        pages={
            None: _page([{"id": "a"}], next_cursor="c1"),
            "c1": _page([{"id": "b"}], next_cursor="c1"),
        }
    )
    items = _client(http).fetch_all("beneficiaries")

    assert [i["id"] for i in items] == ["a", "b"]
    assert len(http.get_calls) == 2


def test_page_without_items_is_treated_as_empty_last_page() -> None:
    http = _FakeAirwallexHttp(pages={None: _FakeResponse(200, {})})

    assert _client(http).fetch_all("counterparties") == []


def test_page_with_non_list_items_raises_page_fetch_error() -> None:
    http = _FakeAirwallexHttp(pages={None: _FakeResponse(200, {"items": "nope"})})

    with pytest.raises(PageFetchError):
        _client(http).fetch_all("beneficiaries")


def test_cancellation_between_pages_returns_collected_items() -> None:
    http = _FakeAirwallexHttp(
        pages={
            None: _page([{"id": "a"}], next_cursor="c1"),
            "c1": _page([{"id": "b"}]),
        }
    )
    items = _client(http).fetch_all("beneficiaries", should_cancel=lambda: len(http.get_calls) >= 1)

    assert [i["id"] for i in items] == ["a"]


def test_fetch_one_returns_none_when_record_is_gone() -> None:
    url = "https://api.test/api/v1/beneficiaries/ben-404"
    http = _FakeAirwallexHttp(pages={url: _FakeResponse(404, {"code": "not_found"})})

    assert _client(http).fetch_one("ben-404", "beneficiaries") is None


def test_fetch_one_returns_payload() -> None:
    url = "https://api.test/api/v1/counterparties/cp-1"
    http = _FakeAirwallexHttp(pages={url: _FakeResponse(200, {"id": "cp-1", "name": "Acme"})})

    assert _client(http).fetch_one("cp-1", "counterparties") == {"id": "cp-1", "name": "Acme"}
