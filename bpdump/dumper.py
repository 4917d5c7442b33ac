"""Compose per-export text reports for Blueprint assets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .defaults import render_value
from .disassembler import Disassembler, EventLink, index_event_links
from .fields import FieldDescriptor, ParameterRole, classify_parameter, describe_field
from .flags import ClassFlags, FunctionFlags, PropertyFlags, format_flags
from .model import BlueprintAsset, ClassExport, Export, FunctionExport

logger = logging.getLogger(__name__)

SECTION_DIVIDER = "=" * 80
UBERGRAPH_FRAME_TYPE = "PointerToUberGraphFrame"
_INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(code) for code in range(32))


def sanitize_filename(name: str) -> str:
    return "".join("_" if char in _INVALID_FILENAME_CHARS else char for char in name)


@dataclass
class Report:
    file_name: str
    text: str


@dataclass
class DumpSummary:
    asset: str
    written: List[Path] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class BlueprintDumper:
    """Write one text file per function and class export of an asset."""

    def dump_asset(self, asset: BlueprintAsset, out_dir: Path) -> DumpSummary:
        """Dump ``asset`` into ``out_dir/<asset name>``.

        Event stubs are processed before the ubergraph so the graph listing can
        be annotated with the events that jump into it.  A failing export is
        logged and skipped.
        """

        target_dir = out_dir / asset.name
        target_dir.mkdir(parents=True, exist_ok=True)
        summary = DumpSummary(asset.name)
        logger.info("%s", asset.path)

        disassembler = Disassembler(asset.version)
        event_links: List[EventLink] = []
        deferred: List[FunctionExport] = []

        for export in asset.exports:
            if isinstance(export, FunctionExport) and export.is_ubergraph:
                deferred.append(export)
                continue
            report = self._guarded(asset, export, summary, disassembler, event_links)
            self._write(report, target_dir, summary)

        graph_links = index_event_links(event_links)
        for function in deferred:
            report = self._guarded(asset, function, summary, disassembler, event_links, graph_links)
            self._write(report, target_dir, summary)
        return summary

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def _render(
        self,
        asset: BlueprintAsset,
        export: Export,
        disassembler: Disassembler,
        event_links: List[EventLink],
        graph_links: Optional[Dict[int, EventLink]] = None,
    ) -> Report:
        if isinstance(export, ClassExport):
            return self.render_class(export)
        report, link = self.render_function(asset, export, disassembler, graph_links)
        if link is not None:
            event_links.append(link)
        return report

    def render_function(
        self,
        asset: BlueprintAsset,
        function: FunctionExport,
        disassembler: Optional[Disassembler] = None,
        event_links: Optional[Dict[int, EventLink]] = None,
    ) -> Tuple[Report, Optional[EventLink]]:
        sections: Dict[ParameterRole, List[FieldDescriptor]] = {role: [] for role in ParameterRole}
        for child in function.fields:
            descriptor = describe_field(child)
            sections[classify_parameter(descriptor.property_flags)].append(descriptor)

        disassembler = disassembler or Disassembler(asset.version)
        result = disassembler.disassemble_function(function, event_links)

        kind, name = "Function", function.name
        if function.is_delegate:
            kind = "Delegate"
            if "__" in name:
                name = name[: name.rindex("__")]
        if function.is_ubergraph:
            kind = "Graph"
            name = name.replace(f"_{asset.name}", "")

        lines = [
            f"Function: {function.name}",
            f"Flags: {format_flags(FunctionFlags, function.flags, strip_prefix=True)}",
        ]
        for role in (ParameterRole.INPUT, ParameterRole.OUTPUT, ParameterRole.LOCAL):
            lines.extend(_fields_section(role.value, sections[role]))
        lines.extend(_header("Code"))
        lines.append(result.text.rstrip("\n"))

        report = Report(f"{kind}_{sanitize_filename(name)}.txt", "\n".join(lines) + "\n")
        return report, result.event_link

    def render_class(self, export: ClassExport) -> Report:
        properties = [describe_field(child) for child in export.fields]
        by_name = {descriptor.name: descriptor for descriptor in properties}
        overrides: List[Tuple[str, Optional[str]]] = []

        for tag in export.defaults or ():
            text = render_value(tag.value)
            descriptor = by_name.get(tag.name)
            if descriptor is not None:
                descriptor.default = text
            else:
                overrides.append((tag.name, text))

        properties = [descriptor for descriptor in properties if descriptor.type != UBERGRAPH_FRAME_TYPE]

        lines = [
            f"Class: {export.name}",
            f"Parent: {export.super_name}",
            f"Flags: {format_flags(ClassFlags, export.flags, strip_prefix=True)}",
            f"Config: {export.config_name}",
        ]
        lines.extend(_fields_section("Properties", properties))
        lines.extend(_header("Parent property overrides"))
        lines.extend(f"{name} = {value or ''}" for name, value in overrides)

        stem = export.name[:-2] if export.name.endswith("_C") else export.name
        return Report(f"Class_{sanitize_filename(stem)}.txt", "\n".join(lines) + "\n")

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------
    def _guarded(
        self,
        asset: BlueprintAsset,
        export: Export,
        summary: DumpSummary,
        disassembler: Disassembler,
        event_links: List[EventLink],
        graph_links: Optional[Dict[int, EventLink]] = None,
    ) -> Optional[Report]:
        try:
            return self._render(asset, export, disassembler, event_links, graph_links)
        except Exception as exc:
            logger.error(
                'Error processing export "%s" from asset "%s". Output may be missing or incomplete.\n[%s] %s',
                export.name,
                asset.name,
                type(exc).__name__,
                exc,
            )
            summary.failed.append(export.name)
            return None

    @staticmethod
    def _write(report: Optional[Report], target_dir: Path, summary: DumpSummary) -> None:
        if report is None:
            return
        path = target_dir / report.file_name
        path.write_text(report.text, "utf-8")
        logger.debug("wrote %s", path)
        summary.written.append(path)


def _header(title: str) -> List[str]:
    return ["", SECTION_DIVIDER, title, SECTION_DIVIDER]


def _fields_section(title: str, fields: Sequence[FieldDescriptor]) -> List[str]:
    lines = _header(title)
    for index, descriptor in enumerate(fields):
        if index:
            lines.append("")
        lines.extend(_field_lines(descriptor))
    return lines


def _field_lines(descriptor: FieldDescriptor) -> Iterable[str]:
    yield f"Name: {descriptor.name}"
    yield f"Type: {descriptor.type}"
    if descriptor.default is not None:
        yield f"Default: {descriptor.default}"
    if descriptor.property_flags:
        yield f"Flags: {format_flags(PropertyFlags, descriptor.property_flags, strip_prefix=True)}"


def matching_paths(paths: Iterable[str], match: str) -> List[str]:
    needle = match.lower()
    return [path for path in paths if needle in path.lower()]


def list_assets(paths: Iterable[str], match: str, out_dir: Path) -> List[str]:
    """Write every asset path containing ``match`` to ``AssetList.txt``."""

    selected = matching_paths(paths, match)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "AssetList.txt"
    for path in selected:
        logger.info("%s", path)
    out_path.write_text("".join(f"{path}\n" for path in selected), "utf-8")
    return selected
