"""Development panel: a browsable HTML listing of every procedure."""

from __future__ import annotations

import json
from html import escape

from tubedesk.rpc.router import Procedure, ProcedureRouter

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: system-ui, sans-serif; margin: 2rem auto; max-width: 960px; color: #222; }}
section {{ border: 1px solid #ddd; border-radius: 6px; padding: 1rem; margin-bottom: 1rem; }}
h2 {{ font-family: monospace; margin: 0 0 .5rem; }}
.kind {{ font-size: .75rem; padding: 2px 6px; border-radius: 4px; color: #fff; }}
.query {{ background: #2b7a4b; }}
.mutation {{ background: #a35a00; }}
pre {{ background: #f6f6f6; padding: .75rem; overflow-x: auto; }}
</style>
</head>
<body>
<h1>{title}</h1>
<p>{count} procedures mounted at <code>{prefix}</code></p>
{sections}
</body>
</html>
"""


def _example(name: str, procedure: Procedure, prefix: str) -> str:
    if procedure.kind == "query":
        if procedure.input_model is None:
            return f"GET {prefix}/{name}"
        return f"GET {prefix}/{name}?input=<json>"
    return f"POST {prefix}/{name}\nContent-Type: application/json\n\n<json>"


def _section(name: str, procedure: Procedure, prefix: str) -> str:
    parts = [
        f'<section id="{escape(name)}">',
        f'<h2>{escape(name)} <span class="kind {procedure.kind}">{procedure.kind}</span></h2>',
    ]
    if procedure.description:
        parts.append(f"<p>{escape(procedure.description)}</p>")
    if procedure.input_model is not None:
        schema = procedure.input_model.model_json_schema(by_alias=True)
        parts.append("<h3>Input</h3>")
        parts.append(f"<pre>{escape(json.dumps(schema, indent=2))}</pre>")
    else:
        parts.append("<p><em>No input.</em></p>")
    parts.append(f"<pre>{escape(_example(name, procedure, prefix))}</pre>")
    parts.append("</section>")
    return "\n".join(parts)


def render_panel(router: ProcedureRouter, prefix: str = "/trpc", title: str = "tubedesk procedures") -> str:
    """Render the router's procedures as a standalone HTML page.

    Args:
        router: Root procedure router.
        prefix: Mount path shown in the examples.
        title: Page title.

    Returns:
        HTML document.
    """
    procedures = router.procedures()
    sections = "\n".join(_section(name, proc, prefix) for name, proc in procedures.items())
    return _PAGE.format(
        title=escape(title),
        count=len(procedures),
        prefix=escape(prefix),
        sections=sections,
    )
