#!/usr/bin/env python3
"""Send sample post-operative reports to a running webhook and check the levels.

Acts as a pure HTTP client against the live server: each sample report is
POSTed to ``/api/postop`` with the shared token, and the returned level is
compared with the level the sample is expected to produce.  Useful as a
smoke test after deploying or after editing the keyword table.

The samples deliberately use different payload shapes (flat, nested under
``symptoms`` / ``postop``, camelCase keys, string numbers) so the normalizer
is exercised end to end.

Usage::

    # Install deps (first time only)
    pip install -e ".[scripts]"

    # Against a local server
    SECRET_TOKEN=dev-secret python scripts/send_sample_reports.py

    # Only the samples whose name contains "fever", showing full JSON
    python scripts/send_sample_reports.py --token dev-secret -k fever -v

    # Also check the error paths (401 / 400 / 405)
    python scripts/send_sample_reports.py --token dev-secret --negative
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from dataclasses import dataclass
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

WEBHOOK_PATH = "/api/postop"


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------

@dataclass
class Sample:
    """One report and the level the server should assign to it."""

    name: str
    report: dict[str, Any]
    expected_level: str


SAMPLES: list[Sample] = [
    Sample("empty report", {}, "routine"),
    Sample(
        "healing well",
        {"patient_id": "DEMO-01", "pain": 2, "bleeding": "no", "temp": 36.8,
         "days_postop": 4, "notes": "Vết mổ khô, hơi ngứa"},
        "routine",
    ),
    Sample(
        "moderate pain",
        {"patientId": "DEMO-02", "symptoms": {"pain_scale": "5"}},
        "routine_review",
    ),
    Sample(
        "swelling and pus",
        {"patient_id": "DEMO-03", "notes": "Sưng và chảy mủ, sốt nhẹ"},
        "routine_review",
    ),
    Sample(
        "infected wound, late",
        {"patient": "DEMO-04", "postop": {"painScale": 7, "discharge": "yes", "daysPostOp": "30"}},
        "urgent_review",
    ),
    Sample(
        "fever 38.5",
        {"patient_id": "DEMO-05", "temperatureC": "38,5"},
        "emergency",
    ),
    Sample(
        "severe pain",
        {"patient_id": "DEMO-06", "painScale": 9},
        "emergency",
    ),
    Sample(
        "active bleeding",
        {"patient_id": "DEMO-07", "bleeding": "active"},
        "emergency",
    ),
    Sample(
        "shortness of breath (text)",
        {"patient_id": "DEMO-08", "patient_name": "Demo Patient",
         "symptoms": {"notes": "Khó thở từ tối qua"}},
        "emergency",
    ),
    Sample(
        "breathing flag",
        {"patient_id": "DEMO-09", "breathing_difficulty": True},
        "emergency",
    ),
]


@dataclass
class Outcome:
    sample: Sample
    status_code: int
    body: dict[str, Any] | None
    error: str | None = None

    @property
    def level(self) -> str | None:
        return (self.body or {}).get("level")

    @property
    def passed(self) -> bool:
        return self.error is None and self.level == self.sample.expected_level


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class WebhookClient:
    """Async HTTP client for the post-op webhook."""

    def __init__(self, base_url: str, token: str, timeout: float = 15.0):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WebhookClient:
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def health_check(self) -> bool:
        """Return True if the server answers ``/health``."""
        try:
            resp = await self._client.get("/health")  # type: ignore[union-attr]
            return resp.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False

    async def send(self, report: Any, *, token: str | None = None, method: str = "POST",
                   raw: bytes | None = None) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._token if token is None else token}"}
        if raw is not None:
            headers["Content-Type"] = "application/json"
            return await self._client.request(  # type: ignore[union-attr]
                method, WEBHOOK_PATH, content=raw, headers=headers,
            )
        return await self._client.request(  # type: ignore[union-attr]
            method, WEBHOOK_PATH, json=report, headers=headers,
        )


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------

async def run_sample(client: WebhookClient, sample: Sample) -> Outcome:
    try:
        resp = await client.send(sample.report)
    except httpx.HTTPError as exc:
        return Outcome(sample, 0, None, error=f"{type(exc).__name__}: {exc}")
    try:
        body = resp.json()
    except ValueError:
        return Outcome(sample, resp.status_code, None, error="response is not JSON")
    if resp.status_code != 200:
        return Outcome(sample, resp.status_code, body, error=body.get("detail"))
    return Outcome(sample, resp.status_code, body)


async def run_negative(client: WebhookClient, console: Console) -> bool:
    """Check that the error paths answer with the documented status codes."""
    checks = [
        ("missing token", client.send({}, token=""), 401),
        ("wrong token", client.send({}, token="definitely-wrong"), 401),
        ("empty body", client.send(None, raw=b""), 400),
        ("not JSON", client.send(None, raw=b"{oops"), 400),
        ("JSON array", client.send([1, 2, 3]), 400),
        ("GET", client.send(None, method="GET"), 405),
    ]
    all_ok = True
    for label, request, expected in checks:
        resp = await request
        ok = resp.status_code == expected
        all_ok = all_ok and ok
        mark = "[green]OK[/]" if ok else "[red]FAIL[/]"
        console.print(f"  {mark} {label}: {resp.status_code} (expected {expected})")
    return all_ok


def print_summary(console: Console, outcomes: list[Outcome], verbose: bool) -> None:
    table = Table(title="Sample reports", show_lines=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("Sample", min_width=24)
    table.add_column("Status", width=6)
    table.add_column("Score", width=6)
    table.add_column("Level", min_width=14)
    table.add_column("Expected", min_width=14)
    table.add_column("Alert", min_width=18)

    for i, o in enumerate(outcomes, 1):
        body = o.body or {}
        alert = body.get("alert") or {}
        alert_str = ", ".join(alert.get("channels") or []) or ("queued" if alert.get("sent") else "-")
        level_str = o.level or "-"
        level_str = f"[green]{level_str}[/]" if o.passed else f"[red]{level_str}[/]"
        table.add_row(
            str(i),
            o.sample.name,
            str(o.status_code or "-"),
            str(body.get("score", "-")),
            level_str,
            o.sample.expected_level,
            alert_str,
        )
    console.print(table)

    for o in outcomes:
        if o.error:
            console.print(f"  [red]{o.sample.name}:[/] {o.error}")
        if verbose and o.body is not None:
            console.rule(o.sample.name)
            console.print_json(json.dumps(o.body, ensure_ascii=False))


# ---------------------------------------------------------------------------
# CLI + async main
# ---------------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send sample post-op reports to the triage webhook.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8080",
        help="Server base URL (default: http://localhost:8080)",
    )
    parser.add_argument(
        "--token",
        default=os.getenv("SECRET_TOKEN"),
        help="Shared webhook token (default: $SECRET_TOKEN)",
    )
    parser.add_argument(
        "-k", "--filter",
        default=None,
        help="Only send samples whose name contains this text",
    )
    parser.add_argument(
        "--negative",
        action="store_true",
        help="Also check the 401 / 400 / 405 error paths",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print every response body",
    )
    parser.add_argument(
        "--timeout",
        type=float, default=15.0,
        help="HTTP request timeout in seconds (default: 15)",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    console = Console()

    if not args.token:
        console.print("[red]No token given.[/] Pass --token or set SECRET_TOKEN.")
        sys.exit(2)

    samples = [s for s in SAMPLES if not args.filter or args.filter.lower() in s.name.lower()]
    if not samples:
        console.print("[red]No samples match the given filter.[/]")
        sys.exit(1)

    async with WebhookClient(args.base_url, args.token, timeout=args.timeout) as client:
        if not await client.health_check():
            console.print(
                f"[red]Server at {args.base_url} is not reachable. "
                f"Is the server running?[/]"
            )
            sys.exit(1)
        console.print(f"[green]Server health check passed[/] ({args.base_url})")

        outcomes = [await run_sample(client, s) for s in samples]
        print_summary(console, outcomes, args.verbose)

        negative_ok = True
        if args.negative:
            console.rule("[bold]Error paths")
            negative_ok = await run_negative(client, console)

    failed = sum(1 for o in outcomes if not o.passed)
    console.print(f"\n  Passed: {len(outcomes) - failed}/{len(outcomes)}")
    if failed or not negative_ok:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
