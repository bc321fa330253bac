import html
from pathlib import Path
from typing import List

import markdown as markdown_lib
import nh3
from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from .config import get_settings

PACKAGE_DIR = Path(__file__).resolve().parent.parent.parent


def discover_template_directories() -> List[str]:
    """
    Discover every 'templates' directory in the package plus the portal file store.

    Slice templates are found under portal/features/*/templates so a new slice
    only has to ship its own directory. The file store root comes last: portal
    and host template files are addressed relative to it
    (e.g. "portals/0/Templates/Article.html").

    Returns:
        List[str]: Template search path in lookup order
    """
    template_dirs = []

    main_templates = PACKAGE_DIR / "templates"
    if main_templates.is_dir():
        template_dirs.append(str(main_templates))

    features_base = PACKAGE_DIR / "features"
    feature_dirs = sorted(
        str(path) for path in features_base.glob("*/templates") if path.is_dir()
    )
    template_dirs.extend(feature_dirs)

    template_dirs.append(str(Path(get_settings().FILE_STORE_ROOT).resolve()))

    return template_dirs


def render_rich_text(value) -> Markup:
    """Render a stored (HTML-escaped) rich text value as sanitized markup."""
    if not value:
        return Markup("")
    return Markup(nh3.clean(html.unescape(str(value))))


def render_markdown(value) -> Markup:
    """Render a markdown field value to HTML."""
    if not value:
        return Markup("")
    rendered = markdown_lib.markdown(str(value), extensions=["extra", "sane_lists"])
    # Markdown passes raw HTML through
    return Markup(nh3.clean(rendered))


TEMPLATE_DIRS = discover_template_directories()

templates = Jinja2Templates(directory=TEMPLATE_DIRS)

templates.env.filters['rich_text'] = render_rich_text
templates.env.filters['markdown'] = render_markdown
templates.env.filters['html_unescape'] = html.unescape
