"""
Plain-text templates with $name placeholders.

    templates/welcome.html:
        <h1>Welcome back, $user!</h1>
        <p>You have visited $visits times.</p>

    @server.get("/")
    def index(request, session):
        return render_template("templates/welcome.html", user="alice", visits=3)

Only the names passed as keywords are substituted; any other $word is
left in the output untouched.
"""

import re
from pathlib import Path
from typing import Any, Union


def load_template(path: Union[str, Path]) -> str:
    """Read a template file as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


def substitute(template: str, **values: Any) -> str:
    """
    Replace $name with str(value) for every keyword given.

    A placeholder only matches a whole name: with user="bob", "$username"
    stays as it is.
    """
    if not values:
        return template

    pattern = re.compile(
        r"\$(" + "|".join(re.escape(name) for name in values) + r")(?![A-Za-z0-9_])"
    )
    return pattern.sub(lambda match: str(values[match.group(1)]), template)


def render_template(path: Union[str, Path], **values: Any) -> str:
    """
    Load a template file and substitute the given values.

    Raises:
        OSError: If the file cannot be read.
    """
    return substitute(load_template(path), **values)
