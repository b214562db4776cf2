from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render_fragment(name: str, **context) -> str:
    """Render a template outside a request, e.g. window content."""
    return templates.get_template(name).render(**context)
