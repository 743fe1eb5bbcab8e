"""
Shared HTML layout for the dashboard pages.
"""
from html import escape

from fastapi.responses import HTMLResponse

NAV_LINKS = [
    ("/", "📋 Jobs"),
    ("/companies", "🏢 Companies"),
    ("/api/stats", "📊 Stats JSON"),
]


def score_badge(score) -> str:
    pct = round(float(score or 0) * 100)
    cls = "hot" if pct >= 90 else "good" if pct >= 80 else "ok" if pct >= 70 else "low"
    return f'<span class="badge {cls}">{pct}%</span>'


def render_page(title: str, body: str, active: str = "/") -> HTMLResponse:
    nav = "".join(
        f'<a href="{href}" class="{"active" if href == active else ""}">{label}</a>' for href, label in NAV_LINKS
    )
    html = f"""
    <!DOCTYPE html>
    <html>
      <head>
        <meta charset="utf-8" />
        <title>{escape(title)}</title>
        <style>
          :root {{
            color-scheme: dark;
          }}
          * {{
            box-sizing: border-box;
          }}
          body {{
            font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
            margin: 0;
            background: #020617;
            color: #e5e7eb;
          }}
          .page {{
            max-width: 1100px;
            margin: 0 auto;
            padding: 1.5rem 1rem 3rem;
          }}
          header {{
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 1.5rem;
            padding: 0.75rem 1rem;
            background: linear-gradient(90deg, rgba(56,189,248,0.08), rgba(34,197,94,0.08));
            border: 1px solid #1f2937;
            border-radius: 0.75rem;
          }}
          header h1 {{
            font-size: 1.4rem;
            margin: 0;
          }}
          nav {{
            display: flex;
            gap: 0.6rem;
          }}
          nav a {{
            text-decoration: none;
            color: #e5e7eb;
            padding: 6px 10px;
            border-radius: 8px;
            background: rgba(255,255,255,0.04);
            border: 1px solid transparent;
          }}
          nav a.active, nav a:hover {{
            color: #38bdf8;
            border-color: #1f2937;
          }}
          a {{
            color: #38bdf8;
          }}
          .card {{
            border-radius: 0.75rem;
            border: 1px solid #1f2937;
            padding: 1rem 1.25rem;
            margin-bottom: 1rem;
          }}
          .filters {{
            display: flex;
            gap: 0.5rem;
            flex-wrap: wrap;
            align-items: center;
          }}
          .filters a {{
            padding: 4px 10px;
            border-radius: 999px;
            border: 1px solid #1f2937;
            text-decoration: none;
          }}
          .filters a.active {{
            background: #0c4a6e;
          }}
          input[type="search"] {{
            padding: 0.4rem 0.6rem;
            border-radius: 0.375rem;
            border: 1px solid #4b5563;
            background: #020617;
            color: #e5e7eb;
          }}
          table {{
            width: 100%;
            border-collapse: collapse;
            margin-top: 1rem;
            font-size: 0.9rem;
          }}
          th, td {{
            border: 1px solid #1f2937;
            padding: 0.4rem 0.6rem;
            vertical-align: top;
          }}
          th {{
            background: #111827;
            text-align: left;
          }}
          .muted {{
            color: #9ca3af;
            font-size: 0.85rem;
          }}
          .stats {{
            display: flex;
            gap: 0.75rem;
            margin-bottom: 1rem;
            flex-wrap: wrap;
          }}
          .stat {{
            flex: 0 0 140px;
            padding: 0.6rem 0.8rem;
            border-radius: 0.75rem;
            border: 1px solid #1f2937;
          }}
          .stat .label {{
            font-size: 0.75rem;
            color: #9ca3af;
          }}
          .stat .value {{
            font-size: 1.2rem;
            font-weight: 600;
          }}
          .badge {{
            padding: 2px 8px;
            border-radius: 999px;
            font-weight: 600;
            font-size: 0.8rem;
          }}
          .badge.hot {{ background: #7f1d1d; }}
          .badge.good {{ background: #713f12; }}
          .badge.ok {{ background: #14532d; }}
          .badge.low {{ background: #1f2937; }}
          .pager {{
            margin-top: 1rem;
            display: flex;
            gap: 1rem;
          }}
        </style>
      </head>
      <body>
        <div class="page">
          <header>
            <h1>{escape(title)}</h1>
            <nav>{nav}</nav>
          </header>
          <main>
            {body}
          </main>
        </div>
      </body>
    </html>
    """
    return HTMLResponse(content=html)
