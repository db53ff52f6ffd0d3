# templating.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from jinja2 import StrictUndefined, TemplateSyntaxError
from jinja2.sandbox import SandboxedEnvironment

from .errors import TemplateExpansionError

if TYPE_CHECKING:
    from .model import Component

logger = logging.getLogger(__name__)

# only {{ }} is syntax; block and comment delimiters use NUL, which argv cannot contain,
# so shell text like ${#VAR} or printf '{%s}' passes through untouched
_env = SandboxedEnvironment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
    block_start_string="\x00{%",
    block_end_string="%}\x00",
    comment_start_string="\x00{#",
    comment_end_string="#}\x00",
)


def expand_args(component: Component, args: List[str]) -> List[str]:
    """
    Render every argument as a template against the component's own fields.

    A syntax error anywhere aborts the whole expansion. An argument that
    parses but fails to render (undefined field, failing filter, ...) is kept
    as written, and the remaining arguments are still expanded.

    Raises:
        TemplateExpansionError: if an argument is not a well-formed template
    """
    context = component.template_context()
    out: List[str] = []

    for arg in args:
        try:
            template = _env.from_string(arg)
        except TemplateSyntaxError as e:
            raise TemplateExpansionError(
                component=component.display_name,
                argument=arg,
                reason=str(e),
            ) from e

        try:
            out.append(template.render(context))
        except Exception as e:  # evaluation is best-effort per argument
            logger.debug("keeping %r unexpanded for %s: %s", arg, component.display_name, e)
            out.append(arg)

    return out
