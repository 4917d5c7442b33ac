"""Run configuration for the command-line dumper."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, auto
from pathlib import Path
from typing import List


class OperatingModes(Flag):
    NONE = 0
    LIST = auto()
    DUMP = auto()


@dataclass(frozen=True)
class DumpOptions:
    asset_root: Path
    asset_match: str
    output_dir: Path
    modes: OperatingModes = OperatingModes.DUMP

    @property
    def operations(self) -> List[str]:
        names = []
        if self.modes & OperatingModes.LIST:
            names.append("List")
        if self.modes & OperatingModes.DUMP:
            names.append("Dump")
        return names

    def describe(self) -> List[str]:
        return [
            f"Asset root: {self.asset_root}",
            f"Asset match: {self.asset_match}",
            f"Output directory: {self.output_dir}",
            f"Operations: {', '.join(self.operations) or 'None'}",
        ]

    @classmethod
    def from_flags(
        cls, asset_root: Path, asset_match: str, output_dir: Path, *, list_assets: bool, dump: bool
    ) -> "DumpOptions":
        """Build options from CLI switches; dumping is implied when none is given."""

        modes = OperatingModes.NONE
        if list_assets:
            modes |= OperatingModes.LIST
        if dump or not list_assets:
            modes |= OperatingModes.DUMP
        return cls(asset_root, asset_match, output_dir, modes)
