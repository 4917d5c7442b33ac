"""Per-asset encoding switches derived from package file versions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Object file versions at which the script encoding changed.
UE4_CHANGE_SETARRAY_BYTECODE = 451
UE5_LARGE_WORLD_COORDINATES = 1004


@dataclass(frozen=True)
class VersionFlags:
    """Switches that change instruction sizes or operand layouts."""

    large_world_coordinates: bool = False
    setarray_has_property: bool = True

    @property
    def coordinate_size(self) -> int:
        return 8 if self.large_world_coordinates else 4

    @classmethod
    def from_file_versions(
        cls, ue4_version: Optional[int], ue5_version: Optional[int] = None
    ) -> "VersionFlags":
        """Derive the flags from a package summary's file versions.

        A missing UE4 version is treated as a current package.
        """

        setarray = ue4_version is None or ue4_version >= UE4_CHANGE_SETARRAY_BYTECODE
        large_world = ue5_version is not None and ue5_version >= UE5_LARGE_WORLD_COORDINATES
        return cls(large_world_coordinates=large_world, setarray_has_property=setarray)
