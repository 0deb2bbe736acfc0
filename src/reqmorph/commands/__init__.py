"""Built-in CLI sub-commands for reqmorph.

* :mod:`~reqmorph.commands.render` -- render a request as Go, curl, or
  gcloud, and show path-parameter decomposition.
* :mod:`~reqmorph.commands.schema` -- export a request message as JSON
  Schema.
* :mod:`~reqmorph.commands.inspect` -- list methods, messages, and HTTP
  bindings of a descriptor.
* :mod:`~reqmorph.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application registered on
the root app in :mod:`reqmorph.app`. Commands report
:class:`~reqmorph.exceptions.ReqmorphError` failures on stderr and exit
with the error's code.
"""
