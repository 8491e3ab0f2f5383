#!/usr/bin/env python3
"""
Fake managed data API for local development and testing.

Implements the small PostgREST subset suggestion-board uses:
- GET    /rest/v1/<table>?select=<cols>&order=<col>.desc&id=eq.<id>
- POST   /rest/v1/<table>          (insert, Prefer: return=representation)
- PATCH  /rest/v1/<table>?id=eq.<id>

Data is kept in memory and lost on exit.

Run with: python scripts/fake_store.py --port 54321
Then set remote.base_url to "http://127.0.0.1:54321" in suggestion_board.yaml.
"""

import argparse
import json
import time
import uuid
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlparse

TABLE = "suggestions"
API_KEY: str | None = None

# Seed rows, keyed by id
FAKE_ROWS: dict[str, dict] = {}


def seed_rows() -> None:
    now = int(time.time() * 1000)
    seeds = [
        {
            "title": "Open the maker lab in the evenings",
            "problem": "The lab closes at 16:00, before most project teams meet.",
            "solution": "Keep it open until 21:00 twice a week with a student monitor.",
            "impact": "More prototypes get built on campus.",
            "category": "מתקנים וציוד",
            "type": "הצעה לשיפור",
        },
        {
            "title": "Founder talks every month",
            "problem": "Students rarely meet people who have started companies.",
            "solution": "Invite one alumni founder per month for an open Q&A.",
            "impact": "A stronger network and practical role models.",
            "category": "נטוורקינג ואירועים",
            "type": "יוזמה",
        },
    ]
    for offset, seed in enumerate(seeds):
        row_id = str(uuid.uuid4())
        FAKE_ROWS[row_id] = {
            "id": row_id,
            **seed,
            "status": "בבדיקה",
            "author": "סטודנט #1000",
            "createdAt": now - offset * 60_000,
            "likes": 0,
            "views": 0,
            "comments": [],
        }


def project(row: dict, select: str) -> dict:
    """Apply a ?select= column list to a row."""
    if select == "*":
        return dict(row)
    columns = [c.strip() for c in select.split(",") if c.strip()]
    return {c: row.get(c) for c in columns}


class FakeStoreHandler(BaseHTTPRequestHandler):
    """HTTP handler implementing the fake data API."""

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        """Override to add prefix."""
        print(f"[FakeStore] {args[0]}")

    def send_json(self, data, status: int = 200) -> None:
        """Send a JSON response."""
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data, ensure_ascii=False).encode())

    def send_no_content(self) -> None:
        self.send_response(204)
        self.end_headers()

    def send_error_json(self, status: int, message: str, code: str = "PGRST000") -> None:
        """Send a PostgREST-style error response."""
        self.send_json(
            {"code": code, "details": None, "hint": None, "message": message},
            status=status,
        )

    def read_body(self):
        content_length = int(self.headers.get("Content-Length", 0))
        if content_length <= 0:
            return None
        return json.loads(self.rfile.read(content_length).decode())

    def route(self) -> dict[str, list[str]] | None:
        """Validate path and API key, returning query params or None."""
        parsed = urlparse(self.path)
        if API_KEY and self.headers.get("apikey") != API_KEY:
            self.send_error_json(401, "Invalid API key", code="PGRST301")
            return None
        prefix = "/rest/v1/"
        if not parsed.path.startswith(prefix):
            self.send_error_json(404, f"Unknown endpoint: {parsed.path}")
            return None
        table = parsed.path[len(prefix):]
        if table != TABLE:
            self.send_error_json(
                404,
                f"Could not find the table 'public.{table}' in the schema cache",
                code="PGRST205",
            )
            return None
        return parse_qs(parsed.query)

    def matching_rows(self, params: dict[str, list[str]]) -> list[dict]:
        id_filter = params.get("id", [])
        if id_filter and id_filter[0].startswith("eq."):
            row = FAKE_ROWS.get(id_filter[0][3:])
            return [row] if row else []
        return list(FAKE_ROWS.values())

    def do_GET(self) -> None:
        """Handle select requests."""
        params = self.route()
        if params is None:
            return

        rows = self.matching_rows(params)
        order = params.get("order", [])
        if order:
            column, _, direction = order[0].partition(".")
            rows.sort(key=lambda r: r.get(column) or 0, reverse=direction == "desc")

        select = params.get("select", ["*"])[0]
        self.send_json([project(r, select) for r in rows])

    def do_POST(self) -> None:
        """Handle inserts."""
        if self.route() is None:
            return
        try:
            body = self.read_body()
        except json.JSONDecodeError:
            self.send_error_json(400, "Invalid JSON body")
            return

        rows = body if isinstance(body, list) else [body]
        inserted = []
        for row in rows:
            if not isinstance(row, dict) or not row.get("title"):
                self.send_error_json(
                    400, 'null value in column "title" violates not-null constraint',
                    code="23502",
                )
                return
            row_id = str(uuid.uuid4())
            stored = {"likes": 0, "views": 0, "comments": [], **row, "id": row_id}
            FAKE_ROWS[row_id] = stored
            inserted.append(stored)

        if "return=representation" in self.headers.get("Prefer", ""):
            self.send_json(inserted, status=201)
        else:
            self.send_no_content()

    def do_PATCH(self) -> None:
        """Handle partial updates filtered by id."""
        params = self.route()
        if params is None:
            return
        try:
            body = self.read_body() or {}
        except json.JSONDecodeError:
            self.send_error_json(400, "Invalid JSON body")
            return

        for row in self.matching_rows(params):
            row.update({k: v for k, v in body.items() if k != "id"})
        self.send_no_content()


def main() -> None:
    global API_KEY

    parser = argparse.ArgumentParser(description="Run fake suggestions data API")
    parser.add_argument(
        "--port",
        type=int,
        default=54321,
        help="Port to listen on (default: 54321)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--api-key",
        help="Require this apikey header on every request",
    )
    parser.add_argument(
        "--empty",
        action="store_true",
        help="Start without seed suggestions",
    )
    args = parser.parse_args()

    API_KEY = args.api_key
    if not args.empty:
        seed_rows()

    server = HTTPServer((args.host, args.port), FakeStoreHandler)
    print(f"Fake data API running at http://{args.host}:{args.port}/rest/v1/{TABLE}")
    print(f"{len(FAKE_ROWS)} seed suggestion(s)")
    print()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        server.shutdown()


if __name__ == "__main__":
    main()
