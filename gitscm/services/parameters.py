"""
Build parameter substitution for gitscm.

Branch names in a project's configuration may reference build parameters
as ``$NAME`` or ``${NAME}``. References to unknown parameters are left in
place, and a missing parameter context leaves the string unchanged.
"""

import re
from typing import Callable, Mapping, Optional

Substitutor = Callable[[Optional[Mapping[str, str]], str], str]

_REFERENCE = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_.]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)')


def substitute(context: Optional[Mapping[str, str]], template: str) -> str:
    """
    Expand parameter references in ``template``.

    Example:
        >>> substitute({'BRANCH': 'feature/x'}, 'origin-$BRANCH')
        'origin-feature/x'
    """
    if context is None or not template:
        return template

    def replace(match):
        name = match.group(1) or match.group(2)
        if name in context:
            return str(context[name])
        return match.group(0)

    return _REFERENCE.sub(replace, template)


def parse_parameters(values) -> dict:
    """
    Parse ``NAME=VALUE`` strings (as given on the command line).

    Raises:
        ValueError: for entries without '=' or with an empty name
    """
    parameters = {}
    for item in values or ():
        name, sep, value = item.partition('=')
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid parameter '{item}', expected NAME=VALUE")
        parameters[name] = value
    return parameters
