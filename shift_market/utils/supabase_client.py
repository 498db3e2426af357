import re
import httpx
from typing import Any, Dict, List, Optional, Sequence, Tuple
from shift_market.utils.logger import get_logger

logger = get_logger("utils.supabase_client")

_CONTENT_RANGE = re.compile(r"^\s*(?:\d+-\d+|\*)/(\d+|\*)\s*$")


def parse_content_range(header: Optional[str]) -> Optional[int]:
    """Total row count from a PostgREST Content-Range header ('0-11/25', '*/0')."""
    if not header:
        return None
    match = _CONTENT_RANGE.match(header)
    if not match or match.group(1) == "*":
        return None
    return int(match.group(1))


class SupabaseClient:
    """
    Lightweight async client for the Supabase REST API.
    """
    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.key = key

        if not self.url or not self.key:
            logger.warning("SUPABASE_URL or SUPABASE_KEY not set in environment.")

        self.headers = {
            "apikey": self.key or "",
            "Authorization": f"Bearer {self.key or ''}",
            "Content-Type": "application/json",
        }
        self.client = httpx.AsyncClient(
            base_url=self.url or "http://localhost",
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )

    async def select(
        self,
        table: str,
        params: Sequence[Tuple[str, str]],
        count: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        """
        Query a Supabase table.

        Params are passed as (name, value) pairs so a column can carry more than
        one filter. With count='exact' the total matching row count is read from
        the Content-Range header. HTTP and transport errors propagate.
        """
        headers = {"Prefer": f"count={count}"} if count else None
        response = await self.client.get(f"/rest/v1/{table}", params=list(params), headers=headers)
        response.raise_for_status()
        rows = response.json()
        total = parse_content_range(response.headers.get("content-range")) if count else None
        logger.debug(f"Supabase select on {table}: total={total}")
        return rows, total

    async def aclose(self) -> None:
        await self.client.aclose()
