"""Read and edit one WDCML topic or xtoc document on disk.

A ``TopicEditor`` wraps a parsed document and exposes typed getters for the
element and attribute paths the models need, plus a small set of edits. Edits
mark the editor dirty; ``save_if_dirty`` checks the file out of source control
and writes it back.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from lxml import etree

from topicsdk.errors import TopicSdkError
from topicsdk.topic_type import TopicType, topic_type_from_tag

if TYPE_CHECKING:
    from topicsdk.run_context import RunContext

logger = logging.getLogger(__name__)

WDCML_NAMESPACE = "http://microsoft.com/wdcml"


class TopicEditor:
    """An XML document editor for a topic (WDCML) or a table of contents (xtoc)."""

    def __init__(self, path: Path, namespace: str | None = WDCML_NAMESPACE) -> None:
        """Parse ``path``. Pass ``namespace=""`` for documents without one."""
        self.path = Path(path)
        self.namespace = namespace or ""
        self.is_dirty = False
        parser = etree.XMLParser(remove_blank_text=False, resolve_entities=False)
        try:
            self.tree = etree.parse(str(self.path), parser)
        except (OSError, etree.XMLSyntaxError) as e:
            msg = f"{self.path} is invalid. {e}"
            raise TopicSdkError(msg) from e
        self.root = self.tree.getroot()

    def __repr__(self) -> str:
        return f"TopicEditor({str(self.path)!r})"

    # -----------------------------
    # Queries
    # -----------------------------

    def _tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}" if self.namespace else name

    def descendants(
        self, name: str | None = None, container: etree._Element | None = None
    ) -> list[etree._Element]:
        """Return descendant elements, optionally only those with ``name``.

        Without a container the whole document is searched, root included.
        """
        tag = self._tag(name) if name is not None else etree.Element
        if container is None:
            return list(self.root.iter(tag))
        return list(container.iterdescendants(tag))

    def first_descendant(
        self, name: str, container: etree._Element | None = None
    ) -> etree._Element | None:
        """Return the first descendant with ``name``, or None."""
        elements = self.descendants(name, container)
        return elements[0] if elements else None

    def unique_descendant(
        self, name: str, container: etree._Element | None = None
    ) -> etree._Element | None:
        """Return the only descendant with ``name``, or None if there is none.

        More than one match is fatal.
        """
        elements = self.descendants(name, container)
        if not elements:
            return None
        if len(elements) > 1:
            msg = f'{self.path}: "{name}" is not unique.'
            raise TopicSdkError(msg)
        return elements[0]

    def _metadata_attribute(self, attribute: str) -> str | None:
        metadata = self.unique_descendant("metadata")
        if metadata is None:
            return None
        return metadata.get(attribute)

    @property
    def metadata_id(self) -> str | None:
        return self._metadata_attribute("id")

    @property
    def metadata_type(self) -> str | None:
        """The raw metadata@type value."""
        return self._metadata_attribute("type")

    @property
    def topic_type(self) -> TopicType:
        """metadata@type mapped onto the closed TopicType vocabulary."""
        return topic_type_from_tag(self.metadata_type)

    @property
    def metadata_msdn_id(self) -> str | None:
        return self._metadata_attribute("msdnID")

    @property
    def metadata_beta(self) -> str:
        """metadata@beta, defaulting to ``"0"``."""
        value = self._metadata_attribute("beta")
        return "0" if value is None else value

    @property
    def intellisense_id(self) -> str | None:
        return self._metadata_attribute("intellisense_id_string")

    @property
    def type_name_from_intellisense_id(self) -> str | None:
        """The text after the last ``.`` of metadata@intellisense_id_string."""
        intellisense_id = self.intellisense_id
        if intellisense_id is None:
            return None
        return intellisense_id[intellisense_id.rfind(".") + 1 :]

    def _metadata_title_element(self) -> etree._Element | None:
        metadata = self.unique_descendant("metadata")
        if metadata is None:
            return None
        return self.unique_descendant("title", metadata)

    @property
    def metadata_title(self) -> str | None:
        title = self._metadata_title_element()
        return element_text(title) if title is not None else None

    @property
    def syntax_name(self) -> str | None:
        syntax = self.unique_descendant("syntax")
        if syntax is None:
            return None
        name = self.first_descendant("name", syntax)
        return element_text(name) if name is not None else None

    @property
    def method_parameters(self) -> str:
        """Render params/param/datatype/xref as ``(T1, T2)``.

        Returns ``""`` when there is no params element. Params without a
        datatype xref are skipped.
        """
        params = self.unique_descendant("params")
        if params is None:
            return ""
        types: list[str] = []
        found_param = False
        for param in self.descendants("param", params):
            found_param = True
            datatype = self.unique_descendant("datatype", param)
            if datatype is None:
                continue
            xref = self.unique_descendant("xref", datatype)
            if xref is None:
                continue
            types.append(element_text(xref))
        if not found_param:
            return ""
        return "(" + ", ".join(types) + ")"

    def _application_platform_attribute(self, attribute: str) -> str | None:
        platform = self.unique_descendant("ApplicationPlatform")
        if platform is None:
            return None
        return platform.get(attribute)

    @property
    def application_platform_name(self) -> str | None:
        return self._application_platform_attribute("name")

    @property
    def application_platform_friendly_name(self) -> str | None:
        return self._application_platform_attribute("friendlyName")

    @property
    def application_platform_version(self) -> str | None:
        return self._application_platform_attribute("version")

    @property
    def applies_class_or_iface_rid(self) -> str | None:
        """The xref@rid inside applies/class, or else inside applies/iface."""
        applies = self.unique_descendant("applies")
        if applies is None:
            return None
        owner = self.unique_descendant("class", applies)
        if owner is None:
            owner = self.unique_descendant("iface", applies)
        if owner is None:
            return None
        return self.rid_of_unique_xref(owner)

    def rid_of_unique_xref(self, element: etree._Element) -> str | None:
        """Return @rid of the unique xref descendant of ``element``."""
        xref = self.unique_descendant("xref", element)
        if xref is None:
            return None
        return xref.get("rid")

    @property
    def interfaces_implemented(self) -> list[str] | None:
        """Names of privately inherited WinRT interfaces, or None if there are none."""
        inheritance = self.unique_descendant("inheritance")
        if inheritance is None:
            return None
        interfaces: list[str] = []
        for ancestor in self.descendants("ancestor", inheritance):
            if ancestor.get("access_level") != "private":
                continue
            xref = self.unique_descendant("xref", ancestor)
            if xref is not None and xref.get("targtype") == "interface_winrt":
                interfaces.append(element_text(xref))
        return interfaces or None

    @property
    def library_filenames(self) -> list[str]:
        """content/info/library/filename values (the binaries a topic links)."""
        filenames: list[str] = []
        content = self.unique_descendant("content")
        if content is None:
            return filenames
        info = self.unique_descendant("info", content)
        if info is None:
            return filenames
        for library in self.descendants("library", info):
            filename = self.unique_descendant("filename", library)
            if filename is not None:
                filenames.append(element_text(filename))
        return filenames

    def xrefs_where_hlink_contains(
        self,
        substring: str,
        case_sensitive: bool = False,
        container: etree._Element | None = None,
    ) -> list[etree._Element]:
        """Return xref elements whose @hlink contains ``substring``."""
        if not case_sensitive:
            substring = substring.lower()
        found = []
        for xref in self.descendants("xref", container):
            hlink = xref.get("hlink")
            if hlink is None:
                continue
            if not case_sensitive:
                hlink = hlink.lower()
            if substring in hlink:
                found.append(xref)
        return found

    def xrefs_for_rid(
        self,
        rid: str,
        case_sensitive: bool = False,
        container: etree._Element | None = None,
    ) -> list[etree._Element]:
        """Return xref elements whose @rid equals ``rid``."""
        if not case_sensitive:
            rid = rid.lower()
        found = []
        for xref in self.descendants("xref", container):
            value = xref.get("rid")
            if value is None:
                continue
            if not case_sensitive:
                value = value.lower()
            if value == rid:
                found.append(xref)
        return found

    def does_section_exist(self, section_id: str) -> bool:
        return any(s.get("id") == section_id for s in self.descendants("section"))

    def is_topic_url_published(self, topic_url: str) -> bool:
        """On an xtoc editor, check the topic is listed and not build-excluded."""
        for node in self.descendants("node"):
            if node.get("topicURL") == topic_url:
                return is_published(node)
        return False

    # -----------------------------
    # Edits
    # -----------------------------

    def _in_document(self, element: etree._Element) -> bool:
        return element.getroottree().getroot() is self.root

    def new_element(
        self,
        name: str,
        content: str | None = None,
        parent: etree._Element | None = None,
    ) -> etree._Element:
        """Create an element in the editor's namespace, optionally appending it.

        The editor is dirtied only when the parent is part of this document.
        """
        element = etree.Element(self._tag(name))
        if content is not None:
            element.text = content
        if parent is not None:
            parent.append(element)
            if self._in_document(parent):
                self.is_dirty = True
        return element

    def set_attribute(
        self, element: etree._Element | None, name: str, value: str | None
    ) -> None:
        """Set (or with None, remove) an attribute on ``element``."""
        if element is None:
            return
        if value is None:
            element.attrib.pop(name, None)
        else:
            element.set(name, value)
        if self._in_document(element):
            self.is_dirty = True

    def set_metadata_title(self, title: str) -> None:
        element = self._metadata_title_element()
        if element is None:
            return
        for child in list(element):
            element.remove(child)
        element.text = title
        self.is_dirty = True

    def set_metadata_beta(self, value: str) -> None:
        metadata = self.unique_descendant("metadata")
        if metadata is not None:
            metadata.set("beta", value)
        self.is_dirty = True

    def set_xtoc_node_text(self, topic_url: str, text: str) -> None:
        """On an xtoc editor, set node@text for the node with this topicURL."""
        for node in self.descendants("node"):
            if node.get("topicURL") == topic_url:
                node.set("text", text)
                self.is_dirty = True
                return

    def ensure_device_families_and_api_contracts(self) -> None:
        """Create empty device_families and api_contracts elements if missing.

        They go after max_os, else min_os, else info.
        """
        anchor = None
        # Elements without children are falsy, so test for None explicitly.
        for name in ("max_os", "min_os", "info"):
            anchor = self.unique_descendant(name)
            if anchor is not None:
                break
        if anchor is None:
            return

        device_families = self.unique_descendant("device_families")
        if device_families is None:
            device_families = self.new_element("device_families")
            anchor.addnext(device_families)
            self.is_dirty = True

        if self.unique_descendant("api_contracts") is None:
            device_families.addnext(self.new_element("api_contracts"))
            self.is_dirty = True

    def delete_all_sections(self) -> None:
        for section in self.descendants("section"):
            parent = section.getparent()
            if parent is None:
                continue
            _remove_keeping_tail(parent, section)
            self.is_dirty = True

    # -----------------------------
    # Save
    # -----------------------------

    def save(self) -> None:
        encoding = self.tree.docinfo.encoding or "utf-8"
        self.tree.write(str(self.path), encoding=encoding, xml_declaration=True)

    def save_if_dirty(self, context: RunContext) -> bool:
        """Check out and save the document if it has unsaved changes.

        Failures are recorded in the save-errors log and do not stop the run.
        Returns True if the file was written.
        """
        if not self.is_dirty:
            return False

        saved = False
        try:
            if not context.dry_run and context.checkout_command:
                subprocess.run(
                    [*context.checkout_command, str(self.path)],
                    check=True,
                    capture_output=True,
                )
            self.save()
            context.logs.files_saved.add(str(self.path))
            saved = True
        except (OSError, subprocess.CalledProcessError) as e:
            logger.debug("Save failed for %s", self.path, exc_info=True)
            context.logs.file_save_errors.add(f"{self.path}: {e}")

        self.is_dirty = False
        return saved


def element_text(element: etree._Element) -> str:
    """The concatenated text content of an element and its descendants."""
    return "".join(element.itertext())


def is_published(element: etree._Element) -> bool:
    """An xtoc node or include is published unless it carries filter_msdn."""
    return element.get("filter_msdn") is None


def _remove_keeping_tail(parent: etree._Element, child: etree._Element) -> None:
    tail = child.tail
    previous = child.getprevious()
    parent.remove(child)
    if not tail:
        return
    if previous is not None:
        previous.tail = (previous.tail or "") + tail
    else:
        parent.text = (parent.text or "") + tail
