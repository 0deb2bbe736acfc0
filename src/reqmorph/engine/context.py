"""Explicit per-invocation context threaded through the builder and emitters.

Nothing in :mod:`reqmorph.engine` or :mod:`reqmorph.emitters` reads
configuration or logging setup from process-wide state: the CLI resolves
the configuration once and hands a :class:`MorphContext` to every call.
Two invocations with distinct contexts never share mutable state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from reqmorph.models import MissingFieldPolicy


@dataclass
class MorphContext:
    """Settings and the logger for one materialisation.

    Attributes:
        missing_fields: How the builder treats REQUIRED fields absent from
            the request.
        logger: Where engine tracing goes. Defaults to the ``reqmorph.engine``
            logger, which stays silent unless the CLI attaches a handler.
        gofmt: ``"auto"``, ``"builtin"``, or the path of a ``gofmt`` binary.
        curl_auth_header: Header added to curl invocations; empty to omit.
    """

    missing_fields: MissingFieldPolicy = MissingFieldPolicy.IGNORE
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("reqmorph.engine")
    )
    gofmt: str = "auto"
    curl_auth_header: str = ""
