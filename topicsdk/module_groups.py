"""Group documented Win32 functions by owning module, and by initial character.

Modules (DLLs and API sets) come from an external module database. The
initial-character view is derived from the modules on demand and is never
kept up to date on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from topicsdk.name_sort_key import name_sort_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from topicsdk.win32_model import Win32Model

logger = logging.getLogger(__name__)

# Entry points every DLL exports; they aren't documented APIs.
ENTRY_POINT_DENYLIST = frozenset(
    {
        "DllCanUnloadNow",
        "DllGetActivationFactory",
        "DllGetClassObject",
        "DllInstall",
        "DllMain",
        "DllRegisterServer",
        "DllUnregisterServer",
    }
)


@dataclass(frozen=True)
class ApiRecord:
    """One API row from the module database."""

    name: str
    binary: str
    apisets: tuple[str, ...] = ()


@dataclass
class FunctionGrouped:
    """A function placed in a group, with its SDK history."""

    module_name: str
    name: str
    sdk_version_introduced_in: str
    function_id: str
    sdk_version_removed_in: str | None = None
    module_moved_to: Module | None = None
    suppress: bool = False  # hide from the alphabetized cross-module listing

    def _removal_text(self) -> str:
        if self.sdk_version_removed_in is None:
            return ""
        if self.module_moved_to is not None:
            return (
                f". Moved to {self.module_moved_to.name} "
                f"in Windows {self.sdk_version_removed_in}"
            )
        return f". Removed in Windows {self.sdk_version_removed_in}"


class FunctionGroupedByModule(FunctionGrouped):
    """A function listed under its module."""

    @property
    def requirements(self) -> str:
        return f"Introduced in Windows {self.sdk_version_introduced_in}" + (
            self._removal_text()
        )


class FunctionGroupedByInitialChar(FunctionGrouped):
    """A function listed under the first character of its name."""

    @property
    def module_description(self) -> str:
        return (
            f"Introduced into {self.module_name} "
            f"in Windows {self.sdk_version_introduced_in}"
        ) + self._removal_text()


class Module:
    """A DLL or an API set and the documented functions it exports."""

    def __init__(self, name: str, is_api_set: bool = False) -> None:
        """Initialize an empty module."""
        self.name = name
        self.is_api_set = is_api_set
        self._apis: list[FunctionGroupedByModule] = []

    def __repr__(self) -> str:
        return f"Module({self.name!r}, apis={len(self._apis)})"

    @property
    def apis(self) -> tuple[FunctionGroupedByModule, ...]:
        return tuple(self._apis)

    def add_api(
        self, name: str, sdk_version_introduced_in: str, function_id: str
    ) -> FunctionGroupedByModule:
        api = FunctionGroupedByModule(
            self.name, name, sdk_version_introduced_in, function_id
        )
        self._apis.append(api)
        return api

    def find_api(self, name: str) -> FunctionGroupedByModule | None:
        return next((a for a in self._apis if a.name == name), None)


class InitialCharGroup:
    """Functions from every module whose names share a first character."""

    def __init__(self, name: str) -> None:
        """Initialize an empty group keyed by ``name``."""
        self.name = name
        self._apis: list[FunctionGroupedByInitialChar] = []

    def __repr__(self) -> str:
        return f"InitialCharGroup({self.name!r}, apis={len(self._apis)})"

    @property
    def apis(self) -> tuple[FunctionGroupedByInitialChar, ...]:
        return tuple(self._apis)

    @property
    def names(self) -> list[str]:
        return [a.name for a in self._apis]

    def add_api(self, api: FunctionGrouped) -> FunctionGroupedByInitialChar:
        grouped = FunctionGroupedByInitialChar(
            api.module_name,
            api.name,
            api.sdk_version_introduced_in,
            api.function_id,
            api.sdk_version_removed_in,
            api.module_moved_to,
        )
        self._apis.append(grouped)
        return grouped

    def find_api(self, name: str) -> FunctionGroupedByInitialChar | None:
        return next((a for a in self._apis if a.name == name), None)

    def sort(self) -> None:
        self._apis.sort(key=lambda a: name_sort_key(a.name))


def initial_char_key(name: str) -> str:
    """Uppercased first character for letters, ``_`` for anything else."""
    if name and name[0].isalpha():
        return name[0].upper()
    return "_"


def group_by_initial_char(
    modules: Iterable[Module], injected: Iterable[FunctionGrouped] = ()
) -> list[InitialCharGroup]:
    """Bucket every non-suppressed function by its initial character.

    ``injected`` adds records that belong to no module's function list, such
    as interfaces and COM classes. Each bucket is sorted by name and the
    buckets are sorted by key.
    """
    groups: dict[str, InitialCharGroup] = {}

    def place(api: FunctionGrouped) -> None:
        if api.suppress:
            return
        key = initial_char_key(api.name)
        group = groups.get(key)
        if group is None:
            group = groups[key] = InitialCharGroup(key)
        group.add_api(api)

    for module in modules:
        for api in module.apis:
            place(api)
    for api in injected:
        place(api)

    for group in groups.values():
        group.sort()
    return sorted(groups.values(), key=lambda g: name_sort_key(g.name))


class UmbrellaLib:
    """The modules behind one umbrella import library."""

    def __init__(self, name: str) -> None:
        """Initialize with no modules."""
        self.name = name
        self.modules: list[Module] = []
        self.initial_char_groups: list[InitialCharGroup] | None = None

    def get_module(self, module_name: str) -> Module | None:
        return next((m for m in self.modules if m.name == module_name), None)

    def get_module_for_api_name(self, api_name: str) -> Module | None:
        """Return the first module that lists ``api_name``."""
        for module in self.modules:
            if module.find_api(api_name) is not None:
                return module
        return None

    def add_api(
        self, record: ApiRecord, sdk_version: str, function_id: str
    ) -> FunctionGroupedByModule:
        """Add a database record to its binary's module, creating the module if new.

        A name already listed in that module is not added again.
        """
        module = self.get_module(record.binary)
        if module is None:
            module = Module(record.binary, is_api_set=bool(record.apisets))
            self.modules.append(module)

        existing = module.find_api(record.name)
        if existing is not None:
            return existing
        return module.add_api(record.name, sdk_version, function_id)

    def record_move(
        self,
        api_name: str,
        from_module: str,
        to_module: str,
        sdk_version_removed_in: str,
        suppress: bool = False,
    ) -> FunctionGroupedByModule | None:
        """Mark a function as moved out of one module into another.

        Returns None when either module or the function isn't known.
        """
        source = self.get_module(from_module)
        target = self.get_module(to_module)
        if source is None or target is None:
            return None
        api = source.find_api(api_name)
        if api is None:
            return None
        api.sdk_version_removed_in = sdk_version_removed_in
        api.module_moved_to = target
        api.suppress = suppress
        return api

    def sort_alphabetically(
        self, injected: Iterable[FunctionGrouped] = ()
    ) -> list[InitialCharGroup]:
        """Rebuild the initial-character grouping from the modules."""
        self.initial_char_groups = group_by_initial_char(self.modules, injected)
        return self.initial_char_groups


def group_by_module(
    win32_model: Win32Model,
    records: Iterable[ApiRecord],
    sdk_version: str,
    umbrella_name: str = "",
) -> UmbrellaLib:
    """Assign every documented function found in the module database to its module.

    Entry-point symbols and functions without a topic are skipped.
    """
    umbrella = UmbrellaLib(umbrella_name)
    skipped = 0
    for record in records:
        if record.name in ENTRY_POINT_DENYLIST:
            continue
        function = win32_model.get_function_by_name(record.name)
        if function is None:
            skipped += 1
            continue
        umbrella.add_api(record, sdk_version, function.id)
    logger.info(
        "Grouped functions into %d modules (%d undocumented APIs skipped)",
        len(umbrella.modules),
        skipped,
    )
    return umbrella
