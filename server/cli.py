"""orgdocs command line.

    orgdocs serve              # MCP server on stdio
    orgdocs api --port 8080    # HTTP API
    orgdocs search "bucket labels"
    orgdocs get naming-standards
    orgdocs health
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from config.settings import Settings
from observability.logging import configure_logging
from pipelines.service import DocsService
from sources.errors import DocSourceError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orgdocs", description="Organization documentation server")
    parser.add_argument("--log-level", default=None, help="Override ORGDOCS_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the MCP server over stdio")

    api = subparsers.add_parser("api", help="Run the HTTP API")
    api.add_argument("--host", default="127.0.0.1", help="Bind address")
    api.add_argument("--port", type=int, default=8080, help="Bind port")

    search = subparsers.add_parser("search", help="Search all documentation")
    search.add_argument("query", help="Free-text query")
    search.add_argument("--limit", type=int, default=5, help="Maximum results")
    search.add_argument("--json", action="store_true", help="Print results as JSON")

    get = subparsers.add_parser("get", help="Print one document")
    get.add_argument("topic", help="Topic name")

    subparsers.add_parser("health", help="Check which origins are reachable")
    return parser


async def _serve(settings: Settings) -> None:
    from server.mcp_server import serve_stdio

    async with DocsService.from_settings(settings) as service:
        await serve_stdio(service)


async def _search(settings: Settings, query: str, limit: int, as_json: bool) -> int:
    async with DocsService.from_settings(settings) as service:
        results = await service.search(query, limit)

    if as_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return 0

    if not results:
        print(f'No results found for "{query}".')
        return 0
    for i, r in enumerate(results, 1):
        print(f"{i}. {r.title} [{r.topic}, {r.category}] score={r.score:.1f}")
        print(f"   {r.excerpt}")
    return 0


async def _get(settings: Settings, topic: str) -> int:
    async with DocsService.from_settings(settings) as service:
        doc = await service.get_doc(topic)
    print(doc.content)
    return 0


async def _health(settings: Settings) -> int:
    async with DocsService.from_settings(settings) as service:
        health = await service.check_health()
    for kind, ok in health.items():
        print(f"{kind:10} {'reachable' if ok else 'unreachable'}")
    return 0 if all(health.values()) else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()

    # stdout belongs to the protocol (serve) or to command output
    configure_logging(settings, stream=sys.stderr, level=args.log_level)

    try:
        if args.command == "serve":
            asyncio.run(_serve(settings))
            return 0
        if args.command == "api":
            import uvicorn
            from server.docs_api import create_app

            uvicorn.run(create_app(), host=args.host, port=args.port)
            return 0
        if args.command == "search":
            return asyncio.run(_search(settings, args.query, args.limit, args.json))
        if args.command == "get":
            return asyncio.run(_get(settings, args.topic))
        if args.command == "health":
            return asyncio.run(_health(settings))
    except DocSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 2


if __name__ == "__main__":
    sys.exit(main())
