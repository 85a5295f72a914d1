"""
Standalone HTML export of selected APIs.

The page is rendered server-side into a single template: styles and the small
navigation script are inline, so the file opens offline. Every user supplied
string goes through ``html.escape``.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from html import escape

from sqlalchemy.orm import Session, selectinload

from knot.core.errors import ValidationError
from knot.models.api import Api
from knot.models.parameter import Parameter
from knot.services.parameter_store import split_by_direction
from knot.services.parameter_tree import ParameterNode, build_parameter_tree, generate_example_json

logger = logging.getLogger(__name__)

UNGROUPED = "Ungrouped"
_PLACEHOLDER = re.compile(r"__([A-Z_]+)__")

EXPORT_LABELS = {
    "en": {
        "title": "API Documentation",
        "generated_at": "Generated at",
        "toc": "Table of Contents",
        "request_params": "Request Parameters",
        "response_params": "Response Parameters",
        "request_example": "Request Example",
        "response_example": "Response Example",
        "note": "Note",
        "name": "Name",
        "type": "Type",
        "required_col": "Required",
        "description": "Description",
        "required": "Required",
        "optional": "Optional",
        "no_params": "No parameters",
        "theme_dark": "Dark",
    },
    "zh": {
        "title": "API 文档",
        "generated_at": "生成时间",
        "toc": "目录",
        "request_params": "请求参数",
        "response_params": "响应参数",
        "request_example": "请求示例",
        "response_example": "响应示例",
        "note": "备注",
        "name": "名称",
        "type": "类型",
        "required_col": "必填",
        "description": "描述",
        "required": "必填",
        "optional": "可选",
        "no_params": "无参数",
        "theme_dark": "深色",
    },
}


@dataclass
class ApiExport:
    api: Api
    group_name: str
    request_parameters: list[Parameter] = field(default_factory=list)
    response_parameters: list[Parameter] = field(default_factory=list)


def resolve_locale(locale: str | None) -> str:
    return locale if locale in EXPORT_LABELS else "en"


def collect_export_items(db: Session, api_ids: list[int]) -> list[ApiExport]:
    """Load the selected APIs in the order given; unknown ids are skipped."""
    if not api_ids:
        raise ValidationError("No API IDs provided")

    unique_ids = list(dict.fromkeys(api_ids))
    apis = (
        db.query(Api)
        .options(selectinload(Api.group), selectinload(Api.parameters))
        .filter(Api.id.in_(unique_ids))
        .all()
    )
    by_id = {api.id: api for api in apis}

    items = []
    for api_id in unique_ids:
        api = by_id.get(api_id)
        if api is None:
            continue
        request_rows, response_rows = split_by_direction(api.parameters)
        items.append(
            ApiExport(
                api=api,
                group_name=api.group.name if api.group else UNGROUPED,
                request_parameters=request_rows,
                response_parameters=response_rows,
            )
        )
    return items


# ---------------------------------------------------------------------------
# Fragments
# ---------------------------------------------------------------------------

def _enum_value(value) -> str:
    if value is None:
        return ""
    return value.value if hasattr(value, "value") else str(value)


def _parameter_rows(forest: list[ParameterNode], labels: dict, depth: int) -> str:
    rows = []
    for node in forest:
        indent = "&nbsp;" * (depth * 4)
        prefix = "└─ " if depth > 0 else ""
        if node.required:
            badge = f'<span class="badge-required">{labels["required"]}</span>'
        else:
            badge = f'<span class="badge-optional">{labels["optional"]}</span>'
        type_name = escape(node.type)
        rows.append(
            "<tr>"
            f'<td class="param-name">{indent}{prefix}{escape(node.name)}</td>'
            f'<td><span class="type-badge type-{type_name}">{type_name}</span></td>'
            f"<td>{badge}</td>"
            f"<td>{escape(node.description) if node.description else '-'}</td>"
            "</tr>"
        )
        if node.children:
            rows.append(_parameter_rows(node.children, labels, depth + 1))
    return "".join(rows)


def render_parameter_table(forest: list[ParameterNode], labels: dict) -> str:
    if not forest:
        return f'<p class="text-muted">{labels["no_params"]}</p>'
    return (
        '<table class="param-table"><thead><tr>'
        f'<th>{labels["name"]}</th><th>{labels["type"]}</th>'
        f'<th>{labels["required_col"]}</th><th>{labels["description"]}</th>'
        f"</tr></thead><tbody>{_parameter_rows(forest, labels, 0)}</tbody></table>"
    )


def _example_block(title: str, forest: list[ParameterNode]) -> str:
    if not forest:
        return ""
    example = json.dumps(generate_example_json(forest), indent=2, ensure_ascii=False)
    return f'<div class="section"><h3>{title}</h3><pre><code>{escape(example)}</code></pre></div>'


def _api_section(index: int, item: ApiExport, labels: dict) -> str:
    api = item.api
    method = _enum_value(api.method)
    request_tree = build_parameter_tree(item.request_parameters)
    response_tree = build_parameter_tree(item.response_parameters)

    parts = [
        f'<div class="api-section" id="api-{index}">',
        '<div class="api-header">',
        f"<h2>{escape(api.name)}</h2>",
        '<div class="api-meta">',
    ]
    if method:
        parts.append(f'<span class="badge badge-{escape(method.lower())}">{escape(method)}</span>')
    parts.append(f'<code class="endpoint">{escape(api.endpoint)}</code>')
    parts.append(f'<span class="badge badge-type">{escape(_enum_value(api.type))}</span>')
    parts.append("</div></div>")

    if api.note:
        parts.append(f'<div class="api-note"><strong>{labels["note"]}:</strong> {escape(api.note)}</div>')

    parts.append(
        f'<div class="section"><h3>{labels["request_params"]}</h3>{render_parameter_table(request_tree, labels)}</div>'
    )
    parts.append(_example_block(labels["request_example"], request_tree))
    parts.append(
        f'<div class="section"><h3>{labels["response_params"]}</h3>{render_parameter_table(response_tree, labels)}</div>'
    )
    parts.append(_example_block(labels["response_example"], response_tree))
    parts.append("</div>")
    return "".join(parts)


def _sidebar(items: list[ApiExport]) -> str:
    # Groups appear in the order their first API was selected
    grouped: dict[tuple[int | None, str], list[tuple[int, ApiExport]]] = {}
    for index, item in enumerate(items):
        grouped.setdefault((item.api.group_id, item.group_name), []).append((index, item))

    parts = []
    for (_, group_name), entries in grouped.items():
        parts.append('<div class="sidebar-group">')
        parts.append(f'<div class="sidebar-group-title">{escape(group_name)}</div>')
        for index, item in entries:
            parts.append(f'<a href="#api-{index}" class="sidebar-api-item">{escape(item.api.name)}</a>')
        parts.append("</div>")
    return "".join(parts)


def generate_html(items: list[ApiExport], locale: str, generated_at: datetime | None = None) -> str:
    locale = resolve_locale(locale)
    labels = EXPORT_LABELS[locale]
    generated = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M UTC")

    sections = "".join(_api_section(index, item, labels) for index, item in enumerate(items))
    logger.info("Rendered export with %d APIs (locale=%s)", len(items), locale)

    values = {
        "LANG": locale,
        "TITLE": labels["title"],
        "GENERATED_LABEL": labels["generated_at"],
        "GENERATED": generated,
        "TOC": labels["toc"],
        "THEME_DARK": labels["theme_dark"],
        "SIDEBAR": _sidebar(items),
        "SECTIONS": sections,
    }
    # Single pass, so placeholder-like text inside user content is left alone
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), HTML_TEMPLATE)


# ---------------------------------------------------------------------------
# HTML TEMPLATE
# ---------------------------------------------------------------------------

HTML_TEMPLATE = r'''<!DOCTYPE html>
<html lang="__LANG__">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>__TITLE__</title>
<style>
*{margin:0;padding:0;box-sizing:border-box}
:root{
  --bg:#f5f5f5;--card:#ffffff;--fg:#1a1a1a;--fg2:#475569;--fg3:#94a3b8;
  --border:#e5e5e5;--accent:#0070f3;--accent-bg:#e3f2fd;--code-bg:#2d2d2d;--code-fg:#f8f8f2;
  --sidebar-w:280px;
  --font:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,"Helvetica Neue",Arial,sans-serif;
  --mono:"SF Mono",Monaco,Menlo,Consolas,monospace;
}
[data-theme="dark"]{
  --bg:#0f172a;--card:#1e293b;--fg:#f1f5f9;--fg2:#cbd5e1;--fg3:#64748b;
  --border:#334155;--accent:#818cf8;--accent-bg:rgba(129,140,248,.12);--code-bg:#0f172a;
}
html{scroll-behavior:smooth}
body{font-family:var(--font);background:var(--bg);color:var(--fg);line-height:1.6;display:flex;min-height:100vh}

/* Sidebar */
.sidebar{position:fixed;top:0;left:0;width:var(--sidebar-w);height:100vh;background:var(--card);
  border-right:1px solid var(--border);overflow-y:auto;padding:20px}
.sidebar h1{font-size:1.5em;margin-bottom:10px;border-bottom:2px solid var(--accent);padding-bottom:10px}
.sidebar-meta{font-size:.75em;color:var(--fg3);margin-bottom:20px}
.sidebar h3{font-size:.8em;text-transform:uppercase;letter-spacing:.05em;color:var(--fg3);margin-bottom:10px}
.sidebar-group{margin-bottom:20px}
.sidebar-group-title{font-size:.85em;font-weight:700;text-transform:uppercase;letter-spacing:.5px;padding:8px 12px;
  margin-bottom:8px;background:var(--bg);border-radius:6px;border-left:3px solid var(--accent)}
.sidebar-api-item{display:block;padding:8px 12px;color:var(--fg2);text-decoration:none;border-radius:6px;
  margin-bottom:4px;font-size:.9em;transition:all .2s}
.sidebar-api-item:hover{background:var(--bg);color:var(--accent)}
.sidebar-api-item.active{background:var(--accent-bg);color:var(--accent);font-weight:500}
.theme-btn{margin-bottom:16px;background:var(--bg);border:1px solid var(--border);border-radius:8px;
  padding:4px 10px;cursor:pointer;color:var(--fg);font-size:12px}

/* Main */
.main-content{flex:1;margin-left:var(--sidebar-w);padding:40px;max-width:calc(100% - var(--sidebar-w))}
.container{max-width:1000px;margin:0 auto;background:var(--card);padding:40px;border-radius:8px;
  box-shadow:0 2px 4px rgba(0,0,0,.1)}
.api-section{margin-bottom:60px;padding-bottom:40px;border-bottom:2px solid var(--border);scroll-margin-top:20px}
.api-section:last-child{border-bottom:none}
.api-header h2{font-size:2em;margin-bottom:15px}
.api-meta{display:flex;gap:12px;align-items:center;margin-bottom:30px;flex-wrap:wrap}
.api-note{background:var(--accent-bg);border-left:3px solid var(--accent);padding:10px 14px;
  border-radius:0 8px 8px 0;font-size:.9em;color:var(--fg2);margin-bottom:24px;white-space:pre-wrap}
.badge{display:inline-block;padding:4px 12px;border-radius:4px;font-size:.85em;font-weight:600;text-transform:uppercase}
.badge-get{background:#e3f2fd;color:#1976d2}
.badge-post{background:#e8f5e9;color:#388e3c}
.badge-put{background:#fff3e0;color:#f57c00}
.badge-delete{background:#ffebee;color:#d32f2f}
.badge-patch{background:#f3e5f5;color:#7b1fa2}
.badge-head,.badge-options{background:#f5f5f5;color:#6b7280}
.badge-type{background:#f5f5f5;color:#666}
.endpoint{background:var(--bg);padding:6px 12px;border-radius:4px;font-family:var(--mono);font-size:.9em;color:#d63384}
.section{margin-bottom:30px}
.section h3{font-size:1.4em;margin-bottom:15px;border-left:4px solid var(--accent);padding-left:12px}

/* Tables */
.param-table{width:100%;border-collapse:collapse;margin-bottom:20px;font-size:.95em}
.param-table th{background:var(--bg);padding:12px;text-align:left;font-weight:600;border-bottom:2px solid var(--border);color:var(--fg2)}
.param-table td{padding:12px;border-bottom:1px solid var(--border);vertical-align:top}
.param-name{font-family:var(--mono);font-weight:500;color:var(--accent)}
.type-badge{display:inline-block;padding:2px 8px;border-radius:3px;font-size:.85em;font-weight:500}
.type-string{background:#e3f2fd;color:#1976d2}
.type-number{background:#e8f5e9;color:#388e3c}
.type-boolean{background:#f3e5f5;color:#7b1fa2}
.type-array{background:#fff3e0;color:#f57c00}
.type-object{background:#ffebee;color:#d32f2f}
.badge-required{color:#d32f2f;font-weight:600;font-size:.85em}
.badge-optional{color:var(--fg3);font-size:.85em}
.text-muted{color:var(--fg3);font-style:italic}

/* Code */
pre{background:var(--code-bg);color:var(--code-fg);padding:20px;border-radius:6px;overflow-x:auto;font-size:.9em;line-height:1.5}
code{font-family:var(--mono)}

@media print{
  body{display:block}
  .sidebar{display:none}
  .main-content{margin-left:0;max-width:100%;padding:20px}
  .container{box-shadow:none;padding:20px}
  .api-section{page-break-inside:avoid}
}
@media(max-width:768px){
  .sidebar{display:none}
  .main-content{margin-left:0;max-width:100%;padding:16px}
}
</style>
</head>
<body>
<div class="sidebar">
  <h1>__TITLE__</h1>
  <div class="sidebar-meta">__GENERATED_LABEL__: __GENERATED__</div>
  <button class="theme-btn" onclick="toggleTheme()">__THEME_DARK__</button>
  <div class="sidebar-section">
    <h3>__TOC__</h3>
    __SIDEBAR__
  </div>
</div>
<div class="main-content">
  <div class="container">
    __SECTIONS__
  </div>
</div>
<script>
function toggleTheme(){
  const t=document.documentElement.getAttribute("data-theme")==="dark"?"light":"dark";
  document.documentElement.setAttribute("data-theme",t);
  localStorage.setItem("knot-doc-theme",t);
}
(function(){
  const t=localStorage.getItem("knot-doc-theme");
  if(t)document.documentElement.setAttribute("data-theme",t);
})();

document.querySelectorAll(".sidebar-api-item").forEach(link=>{
  link.addEventListener("click",function(e){
    e.preventDefault();
    const target=document.querySelector(this.getAttribute("href"));
    if(target){
      target.scrollIntoView({behavior:"smooth",block:"start"});
      document.querySelectorAll(".sidebar-api-item").forEach(i=>i.classList.remove("active"));
      this.classList.add("active");
    }
  });
});

const observer=new IntersectionObserver(entries=>{
  entries.forEach(entry=>{
    if(entry.isIntersecting){
      const id=entry.target.getAttribute("id");
      document.querySelectorAll(".sidebar-api-item").forEach(item=>{
        item.classList.toggle("active",item.getAttribute("href")==="#"+id);
      });
    }
  });
},{rootMargin:"-20% 0px -70% 0px"});
document.querySelectorAll(".api-section").forEach(s=>observer.observe(s));
</script>
</body>
</html>'''
