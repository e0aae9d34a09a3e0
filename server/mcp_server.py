# orgdocs MCP Server - JSON-RPC 2.0 over stdio
# Exposes the documentation catalog, retrieval and search as MCP tools

import sys, json, asyncio, logging
from typing import Dict, Any, List, Optional

from sources.errors import DocSourceError
from pipelines.service import DocsService, MAX_SEARCH_LIMIT

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
DEFAULT_SEARCH_LIMIT = 5


def _text(text: str, is_error: bool = False) -> Dict[str, Any]:
    result: Dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


def _invalid_request() -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}}


TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_topics",
        "description": "List all available documentation topics. Call this first to discover "
                       "what documentation is available.",
        "inputSchema": {"type": "object", "properties": {}, "required": []}
    },
    {
        "name": "get_doc",
        "description": "Retrieve the full content of a documentation topic by name, in markdown.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "topic": {"type": "string", "description": "Topic name from list_topics (e.g. 'naming-standards')"}
            },
            "required": ["topic"]
        }
    },
    {
        "name": "search_docs",
        "description": "Search across all documentation. Returns matching excerpts with relevance scores.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (e.g. 'GCS bucket labels')"},
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results",
                    "default": DEFAULT_SEARCH_LIMIT,
                    "minimum": 1,
                    "maximum": MAX_SEARCH_LIMIT
                }
            },
            "required": ["query"]
        }
    },
    {
        "name": "preview_url",
        "description": "Preview a URL to extract title and content summary before adding it with add_doc.",
        "inputSchema": {
            "type": "object",
            "properties": {"url": {"type": "string", "description": "URL to preview"}},
            "required": ["url"]
        }
    },
    {
        "name": "add_doc",
        "description": "Add a new documentation source. Preview the URL first, then call this to persist.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "topic": {"type": "string", "description": "Unique topic name (e.g. 'gcp-bucket-naming')"},
                "title": {"type": "string", "description": "Human-readable title"},
                "description": {"type": "string", "description": "Brief description of what this doc covers"},
                "url": {"type": "string", "description": "Full URL to the documentation"}
            },
            "required": ["topic", "title", "description", "url"]
        }
    },
    {
        "name": "remove_doc",
        "description": "Remove a user-added documentation source by topic name.",
        "inputSchema": {
            "type": "object",
            "properties": {"topic": {"type": "string", "description": "Topic name to remove"}},
            "required": ["topic"]
        }
    },
    {
        "name": "list_user_docs",
        "description": "List all documentation sources added by the user.",
        "inputSchema": {"type": "object", "properties": {}, "required": []}
    },
    {
        "name": "check_sources",
        "description": "Check which documentation origins are currently reachable.",
        "inputSchema": {"type": "object", "properties": {}, "required": []}
    }
]


class MCPServer:
    def __init__(self, service: DocsService):
        self.service = service
        self.capabilities = {
            "tools": {
                "listChanged": False
            }
        }
        self.server_info = {
            "name": "orgdocs-mcp-server",
            "version": "1.0.0"
        }
        self.session_initialized = False

    async def handle_initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Handle MCP initialize request"""
        client_info = params.get("clientInfo", {})
        logger.info(f"Initializing MCP session with client: {client_info.get('name', 'unknown')}")

        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info
        }

    async def handle_initialized(self, params: Dict[str, Any]) -> None:
        """Handle MCP initialized notification"""
        self.session_initialized = True
        logger.info("MCP session initialized successfully")

    async def handle_tools_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": TOOLS}

    async def handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Execute MCP tool calls; failures come back as isError results"""
        name = params.get("name")
        arguments = params.get("arguments") or {}

        handlers = {
            "list_topics": self._tool_list_topics,
            "get_doc": self._tool_get_doc,
            "search_docs": self._tool_search_docs,
            "preview_url": self._tool_preview_url,
            "add_doc": self._tool_add_doc,
            "remove_doc": self._tool_remove_doc,
            "list_user_docs": self._tool_list_user_docs,
            "check_sources": self._tool_check_sources,
        }
        handler = handlers.get(name)
        if handler is None:
            return _text(f"Unknown tool: {name}", is_error=True)

        try:
            return await handler(arguments)
        except (DocSourceError, ValueError) as e:
            logger.warning(f"Tool {name} failed: {e}")
            return _text(f"Error executing {name}: {e}", is_error=True)

    async def _tool_list_topics(self, args: Dict[str, Any]) -> Dict[str, Any]:
        grouped = self.service.list_topics()

        def lines(descriptors):
            return "\n".join(f"- **{d.topic}**: {d.description}" for d in descriptors)

        output = "# Available Documentation\n\n"
        output += "## Internal Standards (Organization-specific)\n" + lines(grouped["internal"]) + "\n\n"
        output += "## Public Reference Documentation\n" + lines(grouped["public"])
        if grouped["user"]:
            output += "\n\n## User-Added Documentation\n" + lines(grouped["user"])
        output += ("\n\n---\nUse `get_doc` with a topic name to retrieve full documentation.\n"
                   "Use `search_docs` to search across all documentation.")
        return _text(output)

    async def _tool_get_doc(self, args: Dict[str, Any]) -> Dict[str, Any]:
        topic = args.get("topic")
        if not topic:
            return _text("Error: topic parameter is required", is_error=True)

        doc = await self.service.get_doc(topic)
        header = (f"# {doc.descriptor.title}\n"
                  f"**Category**: {doc.descriptor.category}\n"
                  f"**Source**: {doc.descriptor.source.type}\n\n---\n\n")
        return _text(header + doc.content)

    async def _tool_search_docs(self, args: Dict[str, Any]) -> Dict[str, Any]:
        query = (args.get("query") or "").strip()
        if not query:
            return _text("Error: query parameter is required", is_error=True)

        limit = min(int(args.get("limit") or DEFAULT_SEARCH_LIMIT), MAX_SEARCH_LIMIT)
        results = await self.service.search(query, limit)

        if not results:
            return _text(f'No results found for "{query}".\n\n'
                         "Try using different search terms or call list_topics to see available documentation.")

        sections = []
        for i, r in enumerate(results, 1):
            sections.append(f"## {i}. {r.title}\n"
                            f"**Topic**: {r.topic}\n"
                            f"**Category**: {r.category}\n"
                            f"**Relevance**: {r.score:.1f}\n\n"
                            f"> {r.excerpt}\n")

        output = (f'# Search Results for "{query}"\n\n'
                  f"Found {len(results)} matching document(s):\n\n"
                  + "\n".join(sections)
                  + "\n---\nUse `get_doc` with a topic name to retrieve the full document.")
        return _text(output)

    async def _tool_preview_url(self, args: Dict[str, Any]) -> Dict[str, Any]:
        url = args.get("url")
        if not url:
            return _text("Error: url parameter is required", is_error=True)

        preview = await self.service.preview_url(url)
        output = f"# URL Preview: {preview.title}\n\n**URL**: {url}\n**Title**: {preview.title}\n"
        if preview.description:
            output += f"**Description**: {preview.description}\n"
        output += (f"\n**Content Preview**:\n{preview.content_preview}\n\n"
                   "---\nUse `add_doc` to add this as a documentation source.")
        return _text(output)

    async def _tool_add_doc(self, args: Dict[str, Any]) -> Dict[str, Any]:
        fields = [args.get(key) for key in ("topic", "title", "description", "url")]
        if not all(fields):
            return _text("Error: topic, title, description, and url are required", is_error=True)

        topic, title, description, url = fields
        self.service.add_user_doc(topic, title, description, url)
        return _text(f"Added documentation source!\n\n"
                     f"**Topic**: {topic}\n**Title**: {title}\n"
                     f"**Description**: {description}\n**URL**: {url}\n\n"
                     f"You can now use `get_doc('{topic}')` to fetch this document.")

    async def _tool_remove_doc(self, args: Dict[str, Any]) -> Dict[str, Any]:
        topic = args.get("topic")
        if not topic:
            return _text("Error: topic parameter is required", is_error=True)

        if self.service.remove_user_doc(topic):
            return _text(f"Removed documentation source: {topic}")
        return _text(f'Documentation source "{topic}" not found. '
                     "Use `list_user_docs` to see available user docs.", is_error=True)

    async def _tool_list_user_docs(self, args: Dict[str, Any]) -> Dict[str, Any]:
        docs = self.service.list_user_docs()
        if not docs:
            return _text("No user documentation sources found.\n\nUse `add_doc` to add documentation sources.")

        rows = "\n".join(f"| {d.topic} | {d.title} | {d.url} | {d.added_at[:10]} |" for d in docs)
        return _text(f"# User Documentation Sources\n\n"
                     f"Found {len(docs)} user-added documentation source(s):\n\n"
                     f"| Topic | Title | URL | Added |\n|-------|-------|-----|-------|\n{rows}")

    async def _tool_check_sources(self, args: Dict[str, Any]) -> Dict[str, Any]:
        health = await self.service.check_health()
        rows = "\n".join(f"- **{kind}**: {'reachable' if ok else 'unreachable'}" for kind, ok in health.items())
        return _text(f"# Source Health\n\n{rows}")

    async def handle_request(self, request_data: Any) -> Any:
        """Main request handler following JSON-RPC 2.0 spec"""
        if not isinstance(request_data, list):
            return await self._handle_single(request_data)

        # Batch: one response per non-notification, nothing if all were notifications
        if not request_data:
            return _invalid_request()
        responses = [await self._handle_single(item) for item in request_data]
        return [r for r in responses if r is not None] or None

    async def _handle_single(self, request_data: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(request_data, dict):
            return _invalid_request()

        try:
            if request_data.get("jsonrpc") != "2.0":
                raise ValueError("Invalid JSON-RPC version")

            method = request_data.get("method")
            params = request_data.get("params") or {}
            request_id = request_data.get("id")

            if not method:
                raise ValueError("Missing method")

            if method == "initialize":
                result = await self.handle_initialize(params)
            elif method in ("initialized", "notifications/initialized"):
                await self.handle_initialized(params)
                return None  # Notification, no response
            elif method == "ping":
                result = {}
            elif method == "tools/list":
                result = await self.handle_tools_list(params)
            elif method == "tools/call":
                result = await self.handle_tools_call(params)
            else:
                return {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32601, "message": f"Method not found: {method}"}
                }

            return {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": result
            }

        except Exception as e:
            logger.error(f"Error handling request: {e}")
            return {
                "jsonrpc": "2.0",
                "id": request_data.get("id"),
                "error": {
                    "code": -32603,  # Internal error
                    "message": str(e)
                }
            }


async def serve_stdio(service: DocsService) -> None:
    """Serve JSON-RPC requests line by line from stdin until EOF."""
    server = MCPServer(service)
    loop = asyncio.get_running_loop()
    logger.info("Starting MCP server in stdio mode")

    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            break
        if not line.strip():
            continue

        try:
            request_data = json.loads(line)
        except json.JSONDecodeError as e:
            response = {
                "jsonrpc": "2.0",
                "id": None,
                "error": {
                    "code": -32700,  # Parse error
                    "message": f"Parse error: {e}"
                }
            }
        else:
            response = await server.handle_request(request_data)

        if response:  # Don't send response for notifications
            sys.stdout.write(json.dumps(response) + "\n")
            sys.stdout.flush()

    logger.info("stdin closed, MCP server stopping")
