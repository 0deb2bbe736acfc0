"""Emitters -- turn a request into a Go program, a curl script, or a gcloud script.

Each emitter takes the linked method, the decoded request and a
:class:`~reqmorph.engine.context.MorphContext`, and writes one file into
the output directory:

* :mod:`~reqmorph.emitters.golang` -- ``main.go`` with a Go request literal.
* :mod:`~reqmorph.emitters.curl` -- ``curl.sh`` for the first HTTP binding.
* :mod:`~reqmorph.emitters.gcloud` -- ``gcloud.sh`` from a flag-mapping file.

Shared helpers live in :mod:`~reqmorph.emitters.rendering` (Jinja2
templates, file writes) and :mod:`~reqmorph.emitters.gofmt` (Go source
formatting).
"""

from reqmorph.emitters.curl import emit_curl, render_curl
from reqmorph.emitters.gcloud import emit_gcloud, render_gcloud
from reqmorph.emitters.golang import emit_go, render_go_program

__all__ = [
    "emit_curl",
    "emit_gcloud",
    "emit_go",
    "render_curl",
    "render_gcloud",
    "render_go_program",
]
