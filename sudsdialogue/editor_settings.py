"""Settings deciding where generated voice assets for a script are placed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class AssetLocation(Enum):
    """Where generated assets go relative to a shared directory or the script."""

    SHARED_DIRECTORY = auto()
    SHARED_DIRECTORY_SUBDIR = auto()
    SCRIPT_DIRECTORY = auto()
    SCRIPT_DIRECTORY_SUBDIR = auto()


def _combine(base: str, child: str) -> str:
    if not base:
        return child
    if not child:
        return base
    return base.rstrip("/") + "/" + child.lstrip("/")


def _is_under_directory(path: str, directory: str) -> bool:
    path = path.replace("\\", "/")
    directory = directory.replace("\\", "/").rstrip("/")
    if not directory:
        return path.startswith("/")
    if not path.lower().startswith(directory.lower()):
        return False
    return len(path) == len(directory) or path[len(directory)] == "/"


def output_dir(
    location: AssetLocation, shared_path: str, package_path: str, script_name: str
) -> str:
    """The directory for generated assets given a location rule."""
    if location is AssetLocation.SHARED_DIRECTORY_SUBDIR:
        return _combine(shared_path, script_name)
    if location is AssetLocation.SCRIPT_DIRECTORY:
        return package_path
    if location is AssetLocation.SCRIPT_DIRECTORY_SUBDIR:
        return _combine(package_path, script_name)
    return shared_path


@dataclass
class EditorSettings:
    """Options for generating voice assets when scripts are imported."""

    always_auto_generate_voice_over_assets_on_import: bool = False
    directories_to_auto_generate_voice_over_assets_on_import: list[str] = field(
        default_factory=list
    )
    dialogue_voice_asset_location: AssetLocation = AssetLocation.SHARED_DIRECTORY
    dialogue_voice_asset_shared_dir: str = ""
    dialogue_wave_asset_location: AssetLocation = AssetLocation.SHARED_DIRECTORY
    dialogue_wave_asset_shared_dir: str = ""

    def should_generate_voice_assets(self, package_path: str) -> bool:
        """True if assets are always generated or the package is in a listed directory."""
        if self.always_auto_generate_voice_over_assets_on_import:
            return True
        return any(
            _is_under_directory(package_path, directory)
            for directory in self.directories_to_auto_generate_voice_over_assets_on_import
        )

    def voice_output_dir(self, package_path: str, script_name: str) -> str:
        return output_dir(
            self.dialogue_voice_asset_location,
            self.dialogue_voice_asset_shared_dir,
            package_path,
            script_name,
        )

    def wave_output_dir(self, package_path: str, script_name: str) -> str:
        return output_dir(
            self.dialogue_wave_asset_location,
            self.dialogue_wave_asset_shared_dir,
            package_path,
            script_name,
        )