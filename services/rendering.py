from pathlib import Path
from typing import Dict, Any, List
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from services.report_rows import ReportSection

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    enable_async=False
)


def render_html(template_name: str, context: Dict[str, Any]) -> str:
    template = env.get_template(template_name)
    return template.render(**context)


def render_status_page(sections: List[ReportSection], *, title: str, lang: str, dir_size_url: str) -> str:
    """Row titles/values are pre-escaped markup and rendered as-is."""
    html = render_html("status.html", {
        "title": title,
        "lang": lang,
        "sections": sections,
        "dir_size_url": dir_size_url,
    })
    logger.debug(f"Rendered status page with {len(sections)} sections")
    return html
