"""Built-in CLI sub-commands for mangaupdates_cli.

* :mod:`~mangaupdates_cli.commands.generate` -- ``generate-help``: write the
  help catalog of an OpenAPI document to disk.
* :mod:`~mangaupdates_cli.commands.config` -- view and modify user settings.

The API commands themselves are not defined here; they are built from the
catalog at startup by :mod:`mangaupdates_cli.dispatch`.
"""
