"""Header template compiler.

Template syntax (the regex text between the brackets is handed to ``re``
unchanged, so it is written exactly as it would be in Python code):

=============================  ==============================================
``name``                       Norm: the cell is stored under ``name``
``name//regex\\\\``            Transform: the field is capture group 1
``a,,b,,c[[regex]]``           Multi: group N feeds the Nth name
``name{{regex}}``              Split: the cell is split on ``regex``
``...<<regex>>``               Map: two groups become key and value of each
                               split fragment (Split only)
=============================  ==============================================

Transform wins over Multi, which wins over Split; anything else is Norm.
The map rule is looked for independently of the others and may be combined
with any of them, e.g. ``tags{{;\\s*}}<<(\\w+)=(\\w+)>>``. It only has an
effect on Split headers.

``None`` in a template list means "skip this column" and compiles to
``None``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from candi.common.exceptions import PatternError
from candi.common.tracer import traced
from candi.data_types import (
    HeaderSpec,
    MultiHeader,
    NormHeader,
    SplitHeader,
    TransformHeader,
)

logger = logging.getLogger(__name__)

MULTI_TEMPLATE = re.compile(r"(.+?)\[\[(.+?)\]\]")
SPLIT_TEMPLATE = re.compile(r"(.+?)\{\{(.+?)\}\}")
MAP_TEMPLATE = re.compile(r"(.+?)<<(.+?)>>")
TRANSFORM_TEMPLATE = re.compile(r"(.+?)//(.+?)\\\\")

MULTI_NAME_SEPARATOR = ",,"


def _compile_pattern(template: str, pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(template, pattern, str(e)) from e


def compile_header(template: str | None) -> HeaderSpec | None:
    """Compile a single header template.

    Args:
        template: The header template, or None for a skipped column.

    Returns:
        The compiled HeaderSpec, or None when ``template`` is None.

    Raises:
        PatternError: If regex text inside any bracket pair is invalid.
    """
    if template is None:
        return None

    map_pattern = None
    map_match = MAP_TEMPLATE.search(template)
    if map_match:
        map_pattern = _compile_pattern(template, map_match.group(2))

    transform_match = TRANSFORM_TEMPLATE.search(template)
    if transform_match:
        return TransformHeader(
            name=transform_match.group(1),
            pattern=_compile_pattern(template, transform_match.group(2)),
            map_pattern=map_pattern,
        )

    multi_match = MULTI_TEMPLATE.search(template)
    if multi_match:
        return MultiHeader(
            names=tuple(multi_match.group(1).split(MULTI_NAME_SEPARATOR)),
            pattern=_compile_pattern(template, multi_match.group(2)),
            map_pattern=map_pattern,
        )

    split_match = SPLIT_TEMPLATE.search(template)
    if split_match:
        return SplitHeader(
            name=split_match.group(1),
            delimiter=_compile_pattern(template, split_match.group(2)),
            map_pattern=map_pattern,
        )

    return NormHeader(name=template, map_pattern=map_pattern)


@traced
def compile_headers(
    templates: Iterable[str | None],
) -> list[HeaderSpec | None]:
    """Compile a list of header templates, index-aligned with the columns.

    Compile once per distinct template list and reuse the result for every
    row sharing it; the compiled specs are immutable.

    Args:
        templates: Header templates; None entries mark skipped columns.

    Returns:
        One HeaderSpec (or None) per template, in the same order.

    Raises:
        PatternError: If any template holds an invalid regex.
    """
    specs = [compile_header(template) for template in templates]
    logger.debug(
        "Compiled %d headers: %s",
        len(specs),
        [spec.kind.value if spec else None for spec in specs],
    )
    return specs
