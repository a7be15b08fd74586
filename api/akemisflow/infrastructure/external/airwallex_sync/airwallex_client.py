"""
Cliente minimo del API REST de Airwallex (sin SDKs externos).

Requisitos cubiertos:
- requests
- autenticacion con token de corta vida y renovacion transparente
- paginacion por cursor (has_more / next_cursor)
- rate-limit/backoff (429, 5xx, errores de red)
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Iterator, Optional

import requests
from loguru import logger

from akemisflow.shared.constants.sync_constants import RESOURCE_BENEFICIARIES
from akemisflow.shared.exceptions.sync import AuthenticationError, PageFetchError

from .types import Page, parse_iso_datetime, utc_now

# Vida del token si Airwallex no declara expiracion (los tokens duran ~30 min)
_DEFAULT_TOKEN_TTL_S = 30 * 60


@dataclass(frozen=True)
class AirwallexCredentials:
    client_id: str
    api_key: str

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.api_key)


@dataclass(frozen=True)
class AuthSession:
    """
    Token de acceso y su expiracion efectiva.

    expires_at ya incluye el margen de seguridad: es anterior a la expiracion
    declarada por el servidor.
    """

    token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class _RetryableResponse(Exception):
    """Uso interno: la respuesta amerita reintento (429/5xx/red)."""

    def __init__(self, status: Optional[int], detail: str, retry_after: Optional[str] = None) -> None:
        super().__init__(detail)
        self.status = status
        self.detail = detail
        self.retry_after = retry_after


class AirwallexClient:
    """
    Cliente HTTP de Airwallex.

    Importante:
    - El unico estado mutable compartido es la AuthSession. Su renovacion esta
      protegida por un lock: si varios threads la encuentran vencida, solo uno
      re-autentica.
    - No interpreta los registros: devuelve los dicts tal como llegan. El
      parseo/validacion vive en types.py y field_transformer.py.
    """

    def __init__(
        self,
        credentials: AirwallexCredentials,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = "https://api.airwallex.com",
        api_version: str = "2020-09-22",
        page_size: int = 100,
        timeout_s: int = 30,
        max_retries: int = 6,
        min_backoff_s: float = 0.8,
        max_backoff_s: float = 20.0,
        token_margin_s: int = 60,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._page_size = page_size
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._token_margin = timedelta(seconds=token_margin_s)
        self._clock = clock
        self._http = session or requests.Session()
        self._auth: Optional[AuthSession] = None
        self._auth_lock = threading.Lock()

    @property
    def auth_session(self) -> Optional[AuthSession]:
        return self._auth

    # ------------------------------------------------------------------
    # Autenticacion
    # ------------------------------------------------------------------

    def authenticate(self) -> AuthSession:
        """
        Intercambia client_id/api_key por un token.

        Raises:
            AuthenticationError: credenciales ausentes, respuesta no 2xx,
                error de red o respuesta sin token.
        """
        if not self._creds.is_configured:
            raise AuthenticationError(
                "Airwallex no configurado: faltan AIRWALLEX_CLIENT_ID o AIRWALLEX_API_KEY"
            )

        url = f"{self._base_url}/api/v1/authentication/login"
        headers = {
            "Content-Type": "application/json",
            "x-api-version": self._api_version,
            "x-client-id": self._creds.client_id,
            "x-api-key": self._creds.api_key,
        }
        try:
            resp = self._http.request(method="POST", url=url, headers=headers, timeout=self._timeout_s)
        except requests.RequestException as e:
            raise AuthenticationError(f"Error de red autenticando contra Airwallex: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise AuthenticationError(
                f"Airwallex rechazo la autenticacion {resp.status_code}: {resp.text}",
                status=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise AuthenticationError("Respuesta de autenticacion no es JSON valido") from e

        token = payload.get("token") or payload.get("access_token")
        if not token:
            raise AuthenticationError("Respuesta de autenticacion sin token")

        now = self._clock()
        server_expiry = self._server_expiry(payload, now)
        session = AuthSession(token=token, expires_at=server_expiry - self._token_margin)
        self._auth = session
        logger.info(f"Airwallex: autenticacion OK (token valido hasta {session.expires_at.isoformat()})")
        return session

    def _server_expiry(self, payload: dict[str, Any], now: datetime) -> datetime:
        raw_expires_at = payload.get("expires_at")
        if raw_expires_at:
            try:
                return parse_iso_datetime(str(raw_expires_at))
            except ValueError as e:
                raise AuthenticationError(f"expires_at invalido en respuesta de login: {raw_expires_at}") from e

        expires_in = payload.get("expires_in")
        if expires_in is not None:
            return now + timedelta(seconds=float(expires_in))
        return now + timedelta(seconds=_DEFAULT_TOKEN_TTL_S)

    def ensure_authenticated(self) -> AuthSession:
        """Re-autentica si no hay token o si ya vencio. Seguro de llamar antes de cada pagina."""
        with self._auth_lock:
            current = self._auth
            if current is not None and not current.is_expired(self._clock()):
                return current
            if current is not None:
                logger.info("Airwallex: token vencido, re-autenticando...")
            return self.authenticate()

    def _invalidate(self, stale: AuthSession) -> None:
        with self._auth_lock:
            if self._auth is stale:
                self._auth = None

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    def fetch_page(
        self,
        resource: str = RESOURCE_BENEFICIARIES,
        *,
        cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Page:
        """
        Pide una pagina del listado.

        Una respuesta sin has_more/next_cursor se interpreta como ultima pagina.
        """
        params: dict[str, Any] = {"limit": page_size or self._page_size}
        if cursor:
            params["cursor"] = cursor

        resp = self._get(f"/api/v1/{resource}", params=params, error_cls=PageFetchError)
        try:
            payload = resp.json()
        except ValueError as e:
            raise PageFetchError(f"Listado de {resource} no es JSON valido", status=resp.status_code) from e

        if not isinstance(payload, dict):
            raise PageFetchError(f"Listado de {resource} con forma inesperada: {type(payload).__name__}")

        items = payload.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise PageFetchError(f"Listado de {resource}: 'items' no es una lista")

        next_cursor = payload.get("next_cursor") or None
        return Page(
            items=items,
            has_more=bool(payload.get("has_more")),
            next_cursor=str(next_cursor) if next_cursor else None,
        )

    def iter_pages(
        self,
        resource: str = RESOURCE_BENEFICIARIES,
        *,
        page_size: Optional[int] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> Iterator[Page]:
        """
        Recorre el listado completo pagina por pagina, en orden del servidor.

        - Verifica/renueva el token antes de cada pagina (sin reiniciar la paginacion).
        - Termina con has_more=false, cursor ausente o cursor repetido.
        """
        cursor: Optional[str] = None
        seen_cursors: set[str] = set()
        page_number = 0

        while True:
            if should_cancel and should_cancel():
                logger.info(f"Airwallex: paginacion de {resource} cancelada tras {page_number} pagina(s)")
                return

            self.ensure_authenticated()
            page = self.fetch_page(resource, cursor=cursor, page_size=page_size)
            page_number += 1
            logger.debug(f"Airwallex: {resource} pagina {page_number} -> {len(page.items)} item(s)")
            yield page

            if not page.has_more or not page.next_cursor:
                return
            if page.next_cursor in seen_cursors:
                logger.warning(f"Airwallex devolvio un cursor repetido para {resource}; se detiene la paginacion")
                return
            seen_cursors.add(page.next_cursor)
            cursor = page.next_cursor

    def fetch_all(
        self,
        resource: str = RESOURCE_BENEFICIARIES,
        *,
        page_size: Optional[int] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> list[dict[str, Any]]:
        """
        Trae todos los registros del recurso.

        Raises:
            AuthenticationError: si la autenticacion falla.
            PageFetchError: si una pagina falla; `error.items` contiene lo acumulado.
        """
        items: list[dict[str, Any]] = []
        try:
            for page in self.iter_pages(resource, page_size=page_size, should_cancel=should_cancel):
                items.extend(page.items)
        except PageFetchError as e:
            e.items = items + e.items
            raise
        logger.info(f"Airwallex: {len(items)} registro(s) en {resource}")
        return items

    def fetch_one(self, external_id: str, resource: str = RESOURCE_BENEFICIARIES) -> Optional[dict[str, Any]]:
        """Trae un registro por ID. Retorna None si Airwallex responde 404."""
        self.ensure_authenticated()
        resp = self._get(f"/api/v1/{resource}/{external_id}", params={}, error_cls=PageFetchError, allow_not_found=True)
        if resp is None:
            return None
        try:
            payload = resp.json()
        except ValueError as e:
            raise PageFetchError(f"{resource}/{external_id} no es JSON valido", status=resp.status_code) from e
        if not isinstance(payload, dict):
            raise PageFetchError(f"{resource}/{external_id} con forma inesperada")
        return payload

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _get(
        self,
        path: str,
        *,
        params: dict[str, Any],
        error_cls: type[PageFetchError],
        allow_not_found: bool = False,
    ) -> Optional[requests.Response]:
        """
        GET autenticado con backoff para 429/5xx/red y un reintento tras 401.

        Estrategia (igual que el resto de integraciones):
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx / red: exponencial con jitter.
        - 401: el token fue invalidado del lado servidor; se renueva una vez.
        - 4xx (no 429): error inmediato.
        """
        url = f"{self._base_url}{path}"
        reauthenticated = False

        for attempt in range(self._max_retries + 1):
            auth = self.ensure_authenticated()
            try:
                resp = self._send(url, params=params, token=auth.token)
            except _RetryableResponse as retry:
                if attempt >= self._max_retries:
                    raise error_cls(
                        f"Airwallex GET {path} fallo tras {attempt} reintentos: {retry.detail}",
                        status=retry.status,
                    ) from None
                time.sleep(self._backoff_seconds(attempt, retry.retry_after))
                continue

            if 200 <= resp.status_code < 300:
                return resp
            if resp.status_code == 404 and allow_not_found:
                return None
            if resp.status_code == 401 and not reauthenticated:
                logger.info("Airwallex respondio 401; renovando token y reintentando")
                self._invalidate(auth)
                reauthenticated = True
                continue

            raise error_cls(f"Airwallex GET {path} fallo {resp.status_code}: {resp.text}", status=resp.status_code)

        raise error_cls(f"Airwallex GET {path} agoto los reintentos")

    def _send(self, url: str, *, params: dict[str, Any], token: str) -> requests.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "x-api-version": self._api_version,
        }
        try:
            resp = self._http.request(method="GET", url=url, params=params, headers=headers, timeout=self._timeout_s)
        except requests.RequestException as e:
            raise _RetryableResponse(None, f"error de red: {e}") from e

        if resp.status_code == 429 or 500 <= resp.status_code < 600:
            raise _RetryableResponse(resp.status_code, f"{resp.status_code} {resp.text}", resp.headers.get("Retry-After"))
        return resp

    def _backoff_seconds(self, attempt: int, retry_after: Optional[str]) -> float:
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                return self._min_backoff_s
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
        return base + (0.15 * base)
