import argparse
import asyncio
import json
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from legis_search_server.embeddings.embedder import Embedder
from legis_search_server.embeddings.lifecycle import BillSearchService
from legis_search_server.embeddings.models import BillDocument
from legis_search_server.logging_setup import configure_logging
from legis_search_server.sources.base import StaticDocumentSource
from legis_search_server.sources.congress import CongressClient, bill_to_document


def load_bills_file(path):
    """
    Read a JSON file holding either a list of Congress.gov bill records or
    a {"bills": [...]} envelope, and map it to BillDocuments.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    records = data.get("bills", []) if isinstance(data, dict) else data
    documents = []
    for record in records:
        if "id" in record:
            documents.append(BillDocument(**record))
            continue
        doc = bill_to_document(record)
        if doc is not None:
            documents.append(doc)
    return documents


async def main():
    parser = argparse.ArgumentParser(description="Build the bill index and run a query.")
    parser.add_argument("query", help="Natural-language query")
    parser.add_argument("--top-k", type=int, default=10)
    parser.add_argument("--min-similarity", type=float, default=None)
    parser.add_argument("--limit", type=int, default=None, help="Bills to fetch")
    parser.add_argument("--bills-file", help="Use bills from a JSON file instead of Congress.gov")
    args = parser.parse_args()

    configure_logging("INFO")

    if args.bills_file:
        source = StaticDocumentSource(load_bills_file(args.bills_file))
    else:
        source = CongressClient()

    service = BillSearchService(
        source=source,
        embedder=Embedder(),
        fetch_limit=args.limit,
    )

    print("Building index...")
    await service.initialize()
    stats = service.get_stats()
    print(f"Indexed {stats.count} bills (state={stats.state}).")

    if not stats.is_built:
        print("No bills to search.")
        return

    outcome = await service.search(
        args.query,
        top_k=args.top_k,
        min_similarity=args.min_similarity,
    )

    print(f"{outcome.total_results} results in {outcome.search_time_ms:.1f}ms")
    for rank, result in enumerate(outcome.results, start=1):
        print(f"{rank:>2}. [{result.similarity:.3f}] {result.id}  {result.title}")

    await service.dispose()


if __name__ == "__main__":
    asyncio.run(main())
