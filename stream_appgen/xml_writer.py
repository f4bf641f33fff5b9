"""Serialization of Maven coordinate records to ``pom.xml`` fragments.

The project generator only needs two operations, ``to_xml`` and ``indent``,
described by :class:`XmlFragmentWriter`.  :class:`MavenXmlWriter` is the
default implementation, built on :mod:`xml.etree.ElementTree`.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Protocol

from .models import DependencyRecord, Exclusion, PluginRecord


class XmlFragmentWriter(Protocol):
    def to_xml(self, record: DependencyRecord | PluginRecord) -> str: ...

    def indent(self, xml: str, depth: int) -> str: ...


class MavenXmlWriter:
    """Render dependencies and plugins as 4-space indented XML fragments."""

    indent_unit = "    "

    def to_xml(self, record: DependencyRecord | PluginRecord) -> str:
        if isinstance(record, PluginRecord):
            element = _plugin_element(record)
        elif isinstance(record, DependencyRecord):
            element = _dependency_element(record)
        else:
            raise TypeError(f"Cannot serialize {type(record).__name__} to Maven XML")
        ET.indent(element, space=self.indent_unit)
        return ET.tostring(element, encoding="unicode")

    def indent(self, xml: str, depth: int) -> str:
        """Prefix every non-empty line of *xml* with *depth* spaces."""
        pad = " " * depth
        return "\n".join(pad + line if line.strip() else line for line in xml.splitlines())


# ---------------------------------------------------------------------------
# Element builders
# ---------------------------------------------------------------------------


def _text(parent: ET.Element, tag: str, value: str | None) -> None:
    if value:
        ET.SubElement(parent, tag).text = value


def _dependency_element(dep: DependencyRecord) -> ET.Element:
    element = ET.Element("dependency")
    _text(element, "groupId", dep.group_id)
    _text(element, "artifactId", dep.artifact_id)
    _text(element, "version", dep.version)
    # Maven's default type is jar; only spell out the others
    if dep.type and dep.type != "jar":
        _text(element, "type", dep.type)
    _text(element, "classifier", dep.classifier)
    _text(element, "scope", dep.scope)
    if dep.optional:
        _text(element, "optional", "true")
    if dep.exclusions:
        exclusions = ET.SubElement(element, "exclusions")
        for exclusion in dep.exclusions:
            exclusions.append(_exclusion_element(exclusion))
    return element


def _exclusion_element(exclusion: Exclusion) -> ET.Element:
    element = ET.Element("exclusion")
    _text(element, "groupId", exclusion.group_id)
    _text(element, "artifactId", exclusion.artifact_id)
    return element


def _plugin_element(plugin: PluginRecord) -> ET.Element:
    element = ET.Element("plugin")
    _text(element, "groupId", plugin.group_id)
    _text(element, "artifactId", plugin.artifact_id)
    _text(element, "version", plugin.version)
    if plugin.extensions:
        _text(element, "extensions", "true")
    if plugin.configuration:
        configuration = ET.SubElement(element, "configuration")
        _append_config(configuration, plugin.configuration)
    if plugin.dependencies:
        dependencies = ET.SubElement(element, "dependencies")
        for dep in plugin.dependencies:
            dependencies.append(_dependency_element(dep))
    return element


def _append_config(parent: ET.Element, values: dict[str, Any]) -> None:
    for key, value in values.items():
        child = ET.SubElement(parent, key)
        _fill_config_value(child, key, value)


def _fill_config_value(element: ET.Element, key: str, value: Any) -> None:
    if isinstance(value, dict):
        _append_config(element, value)
    elif isinstance(value, list):
        item_tag = _singular(key)
        for item in value:
            _fill_config_value(ET.SubElement(element, item_tag), item_tag, item)
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    elif value is not None:
        element.text = str(value)


def _singular(tag: str) -> str:
    if tag.endswith("ies"):
        return tag[:-3] + "y"
    if tag.endswith("s") and len(tag) > 1:
        return tag[:-1]
    return tag
