from typing import Any

import msgspec

from rpw.utils.constants import DEFAULT_EDITOR_ARGS


class EditorCommand(msgspec.Struct):
    """
    Data model for a user configured external editor.

    `args` is a space separated template; every `%s` in a token is replaced
    by the path of the file being edited.
    """

    enabled: bool = False
    command: str = ""
    args: str = DEFAULT_EDITOR_ARGS

    @property
    def usable(self) -> bool:
        return self.enabled and bool(self.command.strip())

    def as_dict(self) -> dict[str, Any]:
        return msgspec.to_builtins(self)
