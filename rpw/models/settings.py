import json
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict

import msgspec
from loguru import logger

from rpw.models.editor import EditorCommand
from rpw.utils.app_info import AppInfo
from rpw.utils.constants import EditorKind


class Settings:
    EDITOR_ATTRIBUTES = {
        EditorKind.TEXT: "text_editor",
        EditorKind.IMAGE: "image_editor",
        EditorKind.AUDIO: "audio_editor",
    }

    def __init__(
        self, settings_file: Path | None = None, debug_file: Path | None = None
    ) -> None:
        self._settings_file = settings_file or AppInfo().app_settings_file
        self._debug_file = debug_file or AppInfo().debug_file

        # Logging
        self.logging_enabled: bool = True
        self.log_to_stdout: bool = False

        # External editors
        self.text_editor: EditorCommand = EditorCommand()
        self.image_editor: EditorCommand = EditorCommand()
        self.audio_editor: EditorCommand = EditorCommand()

    def editor_for(self, kind: EditorKind) -> EditorCommand:
        return getattr(self, self.EDITOR_ATTRIBUTES[kind])

    def load(self) -> None:
        # The DEBUG marker wins over whatever is stored in the file
        debug_marker = self._debug_file.exists() and self._debug_file.is_file()

        try:
            with open(str(self._settings_file), "r", encoding="utf-8") as file:
                data = json.load(file)
                self._from_dict(data)
        except FileNotFoundError:
            logger.debug(
                f"No settings file found at {self._settings_file}, writing defaults"
            )
            self.save()
        except JSONDecodeError:
            raise

        if debug_marker:
            self.log_to_stdout = True

    def save(self) -> None:
        self._settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(str(self._settings_file), "w", encoding="utf-8") as file:
            json.dump(self._to_dict(), file, indent=4)

    def _from_dict(self, data: Dict[str, Any]) -> None:
        special_attributes = self.EDITOR_ATTRIBUTES.values()

        for key, value in data.items():
            if key in special_attributes:
                continue
            if not hasattr(self, key) or key.startswith("_"):
                continue
            setattr(self, key, value)

        for attribute in special_attributes:
            editor_data = data.get(attribute)
            if editor_data is None:
                continue
            if isinstance(editor_data, dict):
                try:
                    setattr(
                        self, attribute, msgspec.convert(editor_data, EditorCommand)
                    )
                except msgspec.ValidationError as e:
                    logger.warning(f"Ignoring invalid {attribute} settings: {e}")
            else:
                logger.warning(
                    f"Editor data for {attribute} is not a valid type: {type(editor_data)}"
                )

    def _to_dict(self, skip_private: bool = True) -> Dict[str, Any]:
        special_attributes = self.EDITOR_ATTRIBUTES.values()

        data = {}

        for key, value in self.__dict__.items():
            if key in special_attributes:
                continue
            if skip_private and key.startswith("_"):
                continue
            data[key] = value

        for attribute in special_attributes:
            data[attribute] = getattr(self, attribute).as_dict()
        return data
