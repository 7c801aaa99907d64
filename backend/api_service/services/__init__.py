"""Domain services used by the HTTP blueprints and CLI commands.

The score store reads ``db.engine`` and so needs an app context; the Deluge
and PokeAPI clients only need the settings handed to them.
"""
