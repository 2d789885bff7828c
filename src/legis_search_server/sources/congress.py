"""
Congress.gov Client

Fetches recent bills from the Congress.gov v3 API and maps them onto
BillDocument records. Upstream failures are logged and reported as an empty
batch; they are never raised to the search service.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..embeddings.models import BillDocument, BillMetadata

logger = logging.getLogger("legis.congress")


def bill_id_for(bill: Dict[str, Any]) -> Optional[str]:
    """
    Build the canonical '{congress}-{TYPE}-{number}' id, or None if the
    record lacks the fields to do so.
    """
    congress = bill.get("congress")
    bill_type = bill.get("type")
    number = bill.get("number")
    if congress is None or not bill_type or number in (None, ""):
        return None
    return f"{congress}-{str(bill_type).upper()}-{number}"


def bill_to_document(bill: Dict[str, Any]) -> Optional[BillDocument]:
    """
    Map one Congress.gov bill record onto a BillDocument.
    """
    bill_id = bill_id_for(bill)
    if bill_id is None:
        return None

    summaries = bill.get("summaries") or []
    sponsors = bill.get("sponsors") or []
    subjects = bill.get("subjects") or {}
    latest_action = bill.get("latestAction") or {}

    tags = [
        s["name"]
        for s in subjects.get("legislativeSubjects") or []
        if isinstance(s, dict) and s.get("name")
    ]

    return BillDocument(
        id=bill_id,
        title=bill.get("title") or "Untitled Bill",
        summary=(summaries[0].get("text") or "") if summaries else "",
        metadata=BillMetadata(
            sponsor=sponsors[0].get("fullName") if sponsors else None,
            date=bill.get("introducedDate"),
            status=latest_action.get("text"),
            tags=tags,
        ),
    )


class CongressClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        congress: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if api_key is None and settings.congress_api_key is not None:
            api_key = settings.congress_api_key.get_secret_value()

        self.api_key = api_key or None
        self.base_url = str(base_url or settings.congress_api_base_url).rstrip("/")
        self.congress = congress if congress is not None else settings.congress_number
        self.timeout = timeout if timeout is not None else settings.congress_timeout
        self._transport = transport

    async def _request(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        query = {"api_key": self.api_key, "format": "json", **params}

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            resp = await client.get(
                f"{self.base_url}{path}",
                params=query,
                headers={"Accept": "application/json"},
            )
        resp.raise_for_status()
        return resp.json()

    async def fetch_recent_bills(
        self,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Returns raw bill records for the configured congress.
        """
        if not self.api_key:
            logger.warning(
                "Congress API key not configured; set CONGRESS_API_KEY "
                "(https://api.congress.gov/sign-up/)"
            )
            return []

        try:
            data = await self._request(
                f"/bill/{self.congress}",
                {"limit": limit, "offset": offset},
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "Congress API request failed (%s): %s",
                type(exc).__name__,
                str(exc),
            )
            return []

        bills = data.get("bills") or []
        logger.info("Fetched %d bills from Congress API", len(bills))
        return bills

    async def fetch_documents(self, limit: int) -> List[BillDocument]:
        documents: List[BillDocument] = []

        for bill in await self.fetch_recent_bills(limit=limit):
            try:
                doc = bill_to_document(bill)
            except (ValidationError, AttributeError, TypeError) as exc:
                logger.warning("Skipping malformed bill record: %s", exc)
                continue
            if doc is not None:
                documents.append(doc)

        return documents
