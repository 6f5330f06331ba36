"""
HTML rendering for the mood meter result page.
"""

import json
from html import escape

from .grid import EmotionGrid
from .meter import MeterState, MeterView

# States whose page keeps listening for new snapshots
LIVE_STATES = frozenset({MeterState.RENDERING, MeterState.NO_DATA})

PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Mood Results</title>
    <style>
      body {{ margin: 0; font-family: system-ui, sans-serif; }}
      .page {{ min-height: 100vh; display: flex; flex-direction: column;
               align-items: center; justify-content: center; padding: 1rem; }}
      h1 {{ font-size: 2.25rem; font-weight: 700; }}
      .grid {{ display: grid; grid-template-columns: repeat(10, 1fr); gap: 0.5rem; }}
      .cell {{ padding: 1rem; border: 1px solid #e5e7eb; border-radius: 0.375rem; }}
      .message {{ color: #ef4444; }}
      .message.loading {{ color: inherit; }}
    </style>
{liff}  </head>
  <body>
    <div class="page" id="meter">
{body}
    </div>
{live}  </body>
</html>
"""

LIFF_SNIPPET = """    <script src="https://static.line-scdn.net/liff/edge/2/sdk.js"></script>
    <script>
      liff.init({{ liffId: {liff_id} }})
        .then(() => {{ if (!liff.isLoggedIn()) liff.login(); }})
        .catch((err) => console.error("liff init error", err.message));
    </script>
"""

LIVE_SNIPPET = """    <script>
      const meter = document.getElementById("meter");
      const source = new EventSource({stream_url});

      function showMessage(text) {{
        const message = document.createElement("p");
        message.className = "message";
        message.textContent = text;
        meter.replaceChildren(message);
      }}

      function showGrid(grid) {{
        let board = meter.querySelector(".grid");
        if (!board) {{
          const main = document.createElement("main");
          const title = document.createElement("h1");
          title.textContent = "Mood Results";
          board = document.createElement("div");
          board.className = "grid";
          for (const cell of grid.cells) {{
            const el = document.createElement("div");
            el.className = "cell";
            el.dataset.index = cell.index;
            el.title = cell.label;
            board.appendChild(el);
          }}
          main.append(title, board);
          meter.replaceChildren(main);
        }}
        for (const cell of grid.cells) {{
          const el = board.querySelector(`[data-index="${{cell.index}}"]`);
          if (el) el.style.backgroundColor = `rgba(${{cell.hue}},${{cell.opacity}})`;
        }}
      }}

      source.onmessage = (event) => {{
        const view = JSON.parse(event.data);
        if (view.grid) {{
          showGrid(view.grid);
          return;
        }}
        showMessage(view.message || "");
        // Empty sessions keep listening for late entries
        if (view.state !== "no_data") source.close();
      }};
      source.addEventListener("error", (event) => {{
        source.close();
        if (event.data) showMessage(JSON.parse(event.data).error);
      }});
    </script>
"""


def render_grid(grid: EmotionGrid) -> str:
    cells = "\n".join(
        f'        <div class="cell" data-index="{cell.index}" '
        f'title="{escape(cell.label)}" '
        f'style="background-color: {cell.background}"></div>'
        for cell in grid.cells
    )
    return (
        '      <main>\n        <h1>Mood Results</h1>\n'
        f'        <div class="grid">\n{cells}\n        </div>\n      </main>'
    )


def render_message(message: str, loading: bool = False) -> str:
    css = "message loading" if loading else "message"
    return f'      <p class="{css}">{escape(message)}</p>'


def render_page(
    view: MeterView, liff_id: str | None = None, stream_url: str | None = None
) -> str:
    """
    Render a meter view as a complete HTML document.

    Args:
        view: The view to render; a grid view renders the 10x10 grid, any
            other view renders its message centered on the page
        liff_id: LIFF app id; when set the page bootstraps the LINE login flow
        stream_url: SSE endpoint that keeps rendering and no-data pages up to
            date; error and invalid-session pages stay static
    """
    if view.is_message:
        body = render_message(
            view.message or "", loading=view.state is MeterState.LOADING
        )
    else:
        body = render_grid(view.grid)

    liff = LIFF_SNIPPET.format(liff_id=json.dumps(liff_id)) if liff_id else ""
    live = (
        LIVE_SNIPPET.format(stream_url=json.dumps(stream_url))
        if stream_url and view.session_id and view.state in LIVE_STATES
        else ""
    )
    return PAGE_TEMPLATE.format(liff=liff, body=body, live=live)
