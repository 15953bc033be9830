"""Hierarchical model of WinRT/UWP API reference: namespace -> class -> member.

Topics for one project are scattered over many files and arrive in toc order,
so a member can be seen before the type that owns it, and a type before the
namespace declaration that names it. The builder therefore creates placeholder
records as it goes and fills in their fields as topics supply them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from topicsdk.name_sort_key import name_sort_key
from topicsdk.topic_type import TopicType, is_member_topic_type, is_type_topic_type

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from topicsdk.topic_editor import TopicEditor

logger = logging.getLogger(__name__)


class ClassProvenance(Enum):
    """Whether a class was read from a topic or injected from a config file."""

    TOPIC = "topic"
    CONFIG_FILE = "config_file"


@dataclass(frozen=True)
class Member:
    """A property, event, method, or attached property of a class."""

    id: str
    name: str  # methods carry their parameter types, e.g. Foo(Int32, String)
    intellisense_id: str
    topic_type: TopicType
    path: Path | None = None


@dataclass
class ApiClass:
    """A WinRT/UWP class, struct, interface, enum, delegate, or attribute."""

    id: str = ""
    name: str = ""
    path: Path | None = None
    provenance: ClassProvenance = ClassProvenance.TOPIC
    topic_type: TopicType = TopicType.NOT_YET_KNOWN
    interfaces_implemented: list[str] | None = None
    members: list[Member] = field(default_factory=list)
    _member_keys: dict[tuple[str, ...], Member] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @property
    def display_name(self) -> str:
        """The name without any trailing `` `N`` generic arity."""
        return self.name.split("`", 1)[0]

    @property
    def has_members(self) -> bool:
        return (
            self.topic_type in (TopicType.ENUM, TopicType.STRUCT)
            or len(self.members) != 0
        )

    def add_member(
        self,
        member_id: str,
        name: str,
        intellisense_id: str,
        topic_type: TopicType,
        path: Path | None = None,
    ) -> Member:
        """Add a member, or return the existing one if it was already added.

        Members are the same when their ids match, or when both have no id
        and their name and intellisense id match.
        """
        key = ("id", member_id) if member_id else ("name", name, intellisense_id)
        existing = self._member_keys.get(key)
        if existing is not None:
            return existing
        member = Member(member_id, name, intellisense_id, topic_type, path)
        self.members.append(member)
        self._member_keys[key] = member
        return member

    def get_member_by_name(self, name: str) -> Member | None:
        return next((m for m in self.members if m.name == name), None)

    def get_member_by_intellisense_id(self, intellisense_id: str) -> Member | None:
        return next(
            (m for m in self.members if m.intellisense_id == intellisense_id), None
        )

    def sorted_members(self) -> list[Member]:
        return sorted(self.members, key=lambda m: name_sort_key(m.name))


@dataclass(frozen=True)
class AmbiguousMerge:
    """A class lookup whose id and name matched two different records."""

    namespace_project: str
    id: str
    name: str
    matched_by_id: ApiClass
    matched_by_name: ApiClass


@dataclass
class Namespace:
    """A WinRT/UWP namespace, built from the topics of one project."""

    project_name: str
    name: str = ""
    classes: list[ApiClass] = field(default_factory=list)
    ambiguous_merges: list[AmbiguousMerge] = field(
        default_factory=list, init=False, repr=False, compare=False
    )
    _by_id: dict[str, ApiClass] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _by_name: dict[str, ApiClass] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def ensure_class(
        self,
        class_id: str,
        name: str,
        interfaces_implemented: list[str] | None = None,
        path: Path | None = None,
        topic_type: TopicType = TopicType.NOT_YET_KNOWN,
        provenance: ClassProvenance = ClassProvenance.TOPIC,
    ) -> ApiClass:
        """Find or create the class with this id and/or name.

        Lookup goes through two indexes. A non-empty id that is already known
        wins; otherwise a non-empty known name wins; otherwise a new class is
        created. When the id and the name point at different classes the id
        match is used and the conflict is recorded in ``ambiguous_merges``.

        On a match, id, name and topic type are filled in only while unset.
        A non-None interface list replaces the class's list.
        """
        by_id = self._by_id.get(class_id) if class_id else None
        by_name = self._by_name.get(name) if name else None

        if by_id is not None and by_name is not None and by_id is not by_name:
            self.ambiguous_merges.append(
                AmbiguousMerge(self.project_name, class_id, name, by_id, by_name)
            )
            logger.warning(
                "%s: id %r and name %r match different classes; using the id match",
                self.project_name,
                class_id,
                name,
            )

        api_class = by_id if by_id is not None else by_name
        if api_class is None:
            api_class = ApiClass(
                id=class_id,
                name=name,
                path=path,
                provenance=provenance,
                topic_type=topic_type,
            )
            self.classes.append(api_class)
        else:
            if not api_class.id:
                api_class.id = class_id
            if not api_class.name:
                api_class.name = name
            if api_class.topic_type is TopicType.NOT_YET_KNOWN:
                api_class.topic_type = topic_type

        self._index(api_class)

        if interfaces_implemented is not None:
            api_class.interfaces_implemented = list(interfaces_implemented)

        return api_class

    def _index(self, api_class: ApiClass) -> None:
        # First class to claim a key keeps it.
        if api_class.id:
            self._by_id.setdefault(api_class.id, api_class)
        if api_class.name:
            self._by_name.setdefault(api_class.name, api_class)

    def get_class_by_id(self, class_id: str) -> ApiClass | None:
        return self._by_id.get(class_id)

    def get_class_by_name(self, name: str) -> ApiClass | None:
        return self._by_name.get(name)

    def remove_classes(self, predicate: Callable[[ApiClass], bool]) -> list[ApiClass]:
        """Remove every class matching ``predicate`` and rebuild the indexes."""
        removed = [c for c in self.classes if predicate(c)]
        if not removed:
            return removed
        self.classes = [c for c in self.classes if not predicate(c)]
        self._by_id = {}
        self._by_name = {}
        for api_class in self.classes:
            self._index(api_class)
        return removed

    def sorted_classes(self) -> list[ApiClass]:
        return sorted(self.classes, key=lambda c: name_sort_key(c.name))

    def process_topic(self, topic_type: TopicType, editor: TopicEditor) -> ApiClass | None:
        """Merge one type or member topic into this namespace.

        Returns the affected class, or None for topic types that aren't processed
        and for member topics that name no owning class.
        """
        if is_member_topic_type(topic_type):
            owner_rid = editor.applies_class_or_iface_rid
            if not owner_rid:
                logger.warning(
                    "%s: member topic %s names no owning class; skipped",
                    self.project_name,
                    editor.path,
                )
                return None
            owner = self.ensure_class(owner_rid, "", None, editor.path)
            name = editor.metadata_title or ""
            if topic_type is TopicType.METHOD:
                name += editor.method_parameters
            owner.add_member(
                editor.metadata_id or "",
                name,
                editor.intellisense_id or "",
                topic_type,
                editor.path,
            )
            return owner

        if is_type_topic_type(topic_type):
            return self.ensure_class(
                editor.metadata_id or "",
                editor.type_name_from_intellisense_id or "",
                editor.interfaces_implemented,
                editor.path,
                topic_type,
            )

        return None


class ApiRefModel:
    """A hierarchical object model representing the API ref docs of a docset."""

    def __init__(self) -> None:
        """Initialize an empty model."""
        self.namespaces: list[Namespace] = []

    def ensure_namespace(self, project_name: str) -> Namespace:
        """Return the namespace for a project, creating an unnamed one if needed."""
        for namespace in self.namespaces:
            if namespace.project_name == project_name:
                return namespace
        namespace = Namespace(project_name=project_name)
        self.namespaces.append(namespace)
        return namespace

    def process_project(
        self, project_name: str, editors: Iterable[TopicEditor]
    ) -> list[Namespace]:
        """Merge the topics of one project into the model.

        Namespace declaration topics only supply a pending name; it is stamped
        onto every namespace touched by this pass once all topics are merged.
        Returns the namespaces touched.
        """
        pending_name = ""
        touched: list[Namespace] = []

        for editor in editors:
            topic_type = editor.topic_type
            if topic_type is TopicType.NAMESPACE:
                pending_name = editor.metadata_title or ""
                continue
            if topic_type is TopicType.NOT_YET_KNOWN:
                continue

            namespace = self.ensure_namespace(project_name)
            if not any(namespace is t for t in touched):
                touched.append(namespace)
            namespace.process_topic(topic_type, editor)

        # Commit phase: a namespace is named once and keeps its name.
        if pending_name:
            for namespace in touched:
                if not namespace.name:
                    namespace.name = pending_name

        logger.debug(
            "Processed project %s: namespace %r", project_name, pending_name or None
        )
        return touched

    @property
    def ambiguous_merges(self) -> list[AmbiguousMerge]:
        return [m for ns in self.namespaces for m in ns.ambiguous_merges]

    def get_namespace(self, namespace_name: str) -> Namespace | None:
        return next((ns for ns in self.namespaces if ns.name == namespace_name), None)

    def get_project_name_for_namespace(self, namespace_name: str) -> str | None:
        namespace = self.get_namespace(namespace_name)
        return namespace.project_name if namespace is not None else None

    def find_class(self, namespace_name: str, class_name: str) -> bool:
        """Check for a class with this name, or a class implementing an interface of this name."""
        for namespace in self.namespaces:
            if namespace.name != namespace_name:
                continue
            for api_class in namespace.classes:
                if api_class.name == class_name:
                    return True
                if class_name in (api_class.interfaces_implemented or []):
                    return True
        return False

    def get_class(self, namespace_name: str, class_name: str) -> ApiClass | None:
        for namespace in self.namespaces:
            if namespace.name != namespace_name:
                continue
            api_class = namespace.get_class_by_name(class_name)
            if api_class is not None:
                return api_class
        return None

    def inject_class(
        self, namespace_name: str, class_name: str, class_id: str = ""
    ) -> ApiClass | None:
        """Add a class that has no topic of its own to a known namespace."""
        namespace = self.get_namespace(namespace_name)
        if namespace is None:
            logger.warning(
                "Can't add %s.%s: namespace not in model", namespace_name, class_name
            )
            return None
        return namespace.ensure_class(
            class_id, class_name, provenance=ClassProvenance.CONFIG_FILE
        )

    def inject_classes(self, mapping: dict[str, str]) -> list[ApiClass]:
        """Inject classes from a ``Namespace.Class -> id`` mapping."""
        injected = []
        for full_name, class_id in mapping.items():
            namespace_name, _, class_name = full_name.rpartition(".")
            api_class = self.inject_class(namespace_name, class_name, class_id)
            if api_class is not None:
                injected.append(api_class)
        return injected

    def remove_incomplete(self, excluded_types: Iterable[str] = ()) -> None:
        """Drop records that never got completed during ingestion.

        Namespaces with no name or no classes go, as do classes with no id or
        no name and classes whose ``Namespace.Class`` name is excluded.
        """
        excluded = set(excluded_types)
        kept: list[Namespace] = []
        for namespace in self.namespaces:
            if not namespace.name or not namespace.classes:
                continue
            namespace.remove_classes(
                lambda c, ns=namespace: (
                    not c.id or not c.name or f"{ns.name}.{c.name}" in excluded
                )
            )
            kept.append(namespace)
        self.namespaces = kept

    def sorted_namespaces(self) -> list[Namespace]:
        return sorted(self.namespaces, key=lambda ns: name_sort_key(ns.name))
