"""Template rendering and output-file helpers shared by the emitters.

The three output scaffolds (``main.go``, ``curl.sh``, ``gcloud.sh``) are
Jinja2 templates shipped in ``emitters/templates/``. Emitters compute every
value the scaffold needs and pass it in; templates only lay text out.
"""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``emitters/templates/``)."""


def _create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the output templates.

    Autoescape is off: the outputs are Go and shell source, and every
    interpolated value is quoted for its target by the emitter beforehand.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_template(template_name: str, context: dict[str, Any]) -> str:
    """Render *template_name* with *context* and return the text."""
    template = _create_jinja_env().get_template(template_name)
    return template.render(**context)


def write_output(out_dir: str | Path, filename: str, content: str, executable: bool = False) -> Path:
    """Write *content* to ``out_dir/filename``, creating *out_dir* if needed.

    Args:
        out_dir: Destination directory.
        filename: File name inside *out_dir*.
        content: Text to write (UTF-8).
        executable: Set mode 0755, for shell scripts.

    Returns:
        The path written.
    """
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(content, encoding="utf-8")
    if executable:
        path.chmod(
            stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
        )
    return path
