from urllib.parse import quote

from bangs.models import PLACEHOLDER
from bangs.models import BangDefinition


class TemplateError(ValueError):
    """URL template does not hold exactly one placeholder."""


def expand(
    definition: BangDefinition,
    remainder: str,
    placeholder: str = PLACEHOLDER,
) -> str:
    """Return the bang's URL with ``remainder`` escaped into the placeholder."""
    template = definition.url_template
    if template.count(placeholder) != 1:
        raise TemplateError(f"{definition}: expected exactly one {placeholder}")
    # quote() instead of quote_plus(): spaces must become %20
    escaped = quote(remainder, safe="", errors="surrogatepass")
    return template.replace(placeholder, escaped)
