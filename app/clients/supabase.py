# app/clients/supabase.py

import httpx
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

class SupabaseClient:
    """
    Асинхронный клиент для REST API (PostgREST) и Edge Functions Supabase.
    Если передан access_token пользователя, запрос выполняется от его имени,
    и на стороне базы применяются политики RLS.
    """
    def __init__(self, rest_url: str, functions_url: str, api_key: str):
        self.functions_url = functions_url
        self.api_key = api_key
        timeouts = httpx.Timeout(20.0, read=60.0)
        self.async_client = httpx.AsyncClient(
            base_url=rest_url,
            headers={"apikey": api_key},
            timeout=timeouts
        )

    def _headers(self, access_token: str | None = None, prefer: str | None = None) -> dict:
        headers = {"Authorization": f"Bearer {access_token or self.api_key}"}
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def select(
        self,
        table: str,
        params: dict | None = None,
        access_token: str | None = None,
        count: bool = False
    ) -> httpx.Response:
        """
        Выполняет выборку из таблицы. В случае успеха возвращает объект Response.
        С count=True сервер отдает точное количество строк в заголовке Content-Range.
        """
        prefer = "count=exact" if count else None
        try:
            response = await self.async_client.get(
                f"/{table}", params=params, headers=self._headers(access_token, prefer)
            )
            response.raise_for_status()
            return response
        except httpx.RequestError as e:
            logger.error(f"Network error during SELECT request to {e.request.url!r}.", exc_info=True)
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during SELECT request to {e.request.url!r}: {e.response.text}", exc_info=True)
            raise

    async def insert(self, table: str, json: dict | list, access_token: str | None = None) -> list:
        """
        Вставляет одну или несколько строк и возвращает созданные записи (list).
        """
        try:
            response = await self.async_client.post(
                f"/{table}", json=json, headers=self._headers(access_token, "return=representation")
            )
            response.raise_for_status()
            return response.json()
        except httpx.RequestError as e:
            logger.error(f"Network error during INSERT request to {e.request.url!r}.", exc_info=True)
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during INSERT request to {e.request.url!r}: {e.response.text}", exc_info=True)
            raise

    async def update(self, table: str, filters: dict, json: dict, access_token: str | None = None) -> list:
        """
        Обновляет строки, подходящие под фильтры (синтаксис PostgREST, например {"id": "eq.42"}),
        и возвращает обновленные записи (list).
        """
        try:
            response = await self.async_client.patch(
                f"/{table}", params=filters, json=json,
                headers=self._headers(access_token, "return=representation")
            )
            response.raise_for_status()
            return response.json()
        except httpx.RequestError as e:
            logger.error(f"Network error during UPDATE request to {e.request.url!r}.", exc_info=True)
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during UPDATE request to {e.request.url!r}: {e.response.text}", exc_info=True)
            raise

    async def delete(self, table: str, filters: dict, access_token: str | None = None) -> list:
        """
        Удаляет строки, подходящие под фильтры, и возвращает удаленные записи (list).
        """
        try:
            response = await self.async_client.delete(
                f"/{table}", params=filters,
                headers=self._headers(access_token, "return=representation")
            )
            response.raise_for_status()
            return response.json()
        except httpx.RequestError as e:
            logger.error(f"Network error during DELETE request to {e.request.url!r}.", exc_info=True)
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during DELETE request to {e.request.url!r}: {e.response.text}", exc_info=True)
            raise

    async def invoke(self, function: str, json: dict, access_token: str | None = None) -> dict:
        """
        Вызывает Edge Function и возвращает ее JSON-ответ (dict).
        """
        try:
            response = await self.async_client.post(
                f"{self.functions_url}/{function}", json=json, headers=self._headers(access_token)
            )
            response.raise_for_status()
            return response.json()
        except httpx.RequestError as e:
            logger.error(f"Network error while invoking function '{function}'.", exc_info=True)
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error while invoking function '{function}': {e.response.text}", exc_info=True)
            raise


def parse_total_count(response: httpx.Response) -> int:
    """Достает точное количество строк из заголовка Content-Range ('0-9/42' или '*/0')."""
    content_range = response.headers.get("Content-Range", "")
    _, _, total = content_range.partition("/")
    try:
        return int(total)
    except ValueError:
        return 0


# Создаем синглтон
supabase_client = SupabaseClient(
    rest_url=settings.REST_URL,
    functions_url=settings.FUNCTIONS_URL,
    api_key=settings.SUPABASE_ANON_KEY
)
