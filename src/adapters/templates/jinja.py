"""
Jinja2 template renderer - Implements TemplateRenderer protocol.

Templates live next to this module and are rendered with autoescaping, so a
subscriber name can never inject markup into the HTML body.
"""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.domain.ports import RenderedEmail

TEMPLATES_DIR = Path(__file__).parent

CONFIRMATION_HTML_TEMPLATE = "confirmation_email.html"
CONFIRMATION_TXT_TEMPLATE = "confirmation_email.txt"


class JinjaTemplateRenderer:
    """Renders outbound email bodies from the bundled templates."""

    def __init__(self, templates_dir: Path = TEMPLATES_DIR) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )

    def render_confirmation(self, name: str, link: str) -> RenderedEmail:
        context = {"name": name, "link": link}
        return RenderedEmail(
            html=self._env.get_template(CONFIRMATION_HTML_TEMPLATE).render(context),
            text=self._env.get_template(CONFIRMATION_TXT_TEMPLATE).render(context),
        )
