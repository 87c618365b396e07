from __future__ import annotations

import json
from html import escape
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..audit import AuditLog
from ..auth_utils import require_log_token
from ..constants import LOG_PAGE_ROWS
from ..schemas import LogEntry, LogsResponse

router = APIRouter(prefix="", tags=["logs"])

_PAGE_STYLE = """
    body{font-family:system-ui;margin:20px;background:#0b1020;color:#eaf0ff}
    a{color:#5eead4}
    .muted{opacity:.7}
    table{width:100%;border-collapse:collapse;margin-top:12px}
    th,td{border-bottom:1px solid rgba(255,255,255,.12);padding:10px 8px;text-align:left;vertical-align:top}
    th{font-size:12px;letter-spacing:.12em;text-transform:uppercase;opacity:.75}
    .pill{display:inline-block;border:1px solid rgba(255,255,255,.16);padding:2px 8px;border-radius:999px;font-size:12px}
    .wrap{white-space:pre-wrap;word-break:break-word}
"""


def _audit(request: Request) -> AuditLog:
    return request.app.state.relay.audit


def _render_row(entry: LogEntry) -> str:
    details = json.dumps(entry.data, indent=2, ensure_ascii=False, default=str)
    return (
        "<tr>"
        f'<td class="muted">{escape(entry.ts)}</td>'
        f'<td><span class="pill">{escape(entry.room or "-")}</span></td>'
        f"<td><b>{escape(entry.type or '-')}</b></td>"
        f'<td class="wrap">{escape(details)}</td>'
        "</tr>"
    )


def render_logs_page(rows: List[LogEntry], token: Optional[str]) -> str:
    json_href = "/logs.json"
    if token:
        json_href += f"?token={quote(token, safe='')}"
    body = "\n".join(_render_row(entry) for entry in rows)
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>Pong Relay Logs</title>
  <style>{_PAGE_STYLE}</style>
</head>
<body>
  <h1>Pong Relay Logs</h1>
  <div class="muted">Showing the newest {len(rows)} entries (at most {LOG_PAGE_ROWS}). JSON: <a href="{escape(json_href)}">/logs.json</a></div>
  <table>
    <thead>
      <tr><th>Time (UTC)</th><th>Room</th><th>Event</th><th>Details</th></tr>
    </thead>
    <tbody>
{body}
    </tbody>
  </table>
</body>
</html>"""


@router.get("/logs", response_class=HTMLResponse)
async def logs_page(request: Request, token: Optional[str] = Depends(require_log_token)):
    rows = _audit(request).entries(limit=LOG_PAGE_ROWS)
    return HTMLResponse(render_logs_page(rows, token))


@router.get("/logs.json", response_model=LogsResponse)
async def logs_json(request: Request, _: Optional[str] = Depends(require_log_token)):
    audit = _audit(request)
    return LogsResponse(count=len(audit), logs=audit.entries())
