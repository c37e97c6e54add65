"""
Assignment store: people, groups and shifts maintained by user edits.

People are identified by name case-insensitively and keep the spelling they
were first added with. to_mappings() produces the person -> group and
person -> shift lookups consumed by compute_report().

Persistence is best effort: save() writes a JSON document and load() returns
an empty store when the file is missing.
"""

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path

from .config import EXPORT_FORMAT_VERSION
from .resolve import is_identified, resolve_person

logger = logging.getLogger(__name__)


def _clean(name) -> str:
    return "" if name is None else str(name).strip()


class AssignmentStore:
    """In-memory register of people with their group and shift."""

    def __init__(self):
        self._people: dict[str, dict] = {}
        self.groups: list[str] = []
        self.shifts: list[str] = []

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------
    def find_person(self, name: str) -> dict | None:
        return self._people.get(_clean(name).lower())

    @property
    def people(self) -> list[dict]:
        return [dict(p) for p in self._people.values()]

    def add_person(self, name: str, group: str = "", shift: str = "") -> dict:
        """Add a person, or update group/shift of an existing one.

        Blank group or shift arguments leave an existing assignment alone.
        """
        name = _clean(name)
        if not name:
            raise ValueError("Person name must not be empty")

        person = self.find_person(name)
        if person is None:
            person = {"name": name, "group": _clean(group), "shift": _clean(shift)}
            self._people[name.lower()] = person
            logger.debug("Added person %s", name)
        else:
            if _clean(group):
                person["group"] = _clean(group)
            if _clean(shift):
                person["shift"] = _clean(shift)

        self._register(person["group"], self.groups)
        self._register(person["shift"], self.shifts)
        return dict(person)

    def remove_person(self, name: str) -> None:
        key = _clean(name).lower()
        if key not in self._people:
            raise KeyError(name)
        del self._people[key]

    def assign_group(self, name: str, group: str) -> None:
        """Set (or clear with '') the group of an existing person."""
        person = self._require(name)
        person["group"] = _clean(group)
        self._register(person["group"], self.groups)

    def assign_shift(self, name: str, shift: str) -> None:
        """Set (or clear with '') the shift of an existing person."""
        person = self._require(name)
        person["shift"] = _clean(shift)
        self._register(person["shift"], self.shifts)

    def register_people(self, records) -> int:
        """Add every identified person found in records; return how many were new."""
        added = 0
        for record in records:
            name = resolve_person(record)
            if is_identified(name) and self.find_person(name) is None:
                self.add_person(name)
                added += 1
        logger.info("Registered %d new people from %d records", added, len(records))
        return added

    # ------------------------------------------------------------------
    # Groups and shifts
    # ------------------------------------------------------------------
    def add_group(self, name: str) -> None:
        if not _clean(name):
            raise ValueError("Group name must not be empty")
        self._register(_clean(name), self.groups)

    def remove_group(self, name: str) -> None:
        self._unregister(_clean(name), self.groups, "group")

    def add_shift(self, name: str) -> None:
        if not _clean(name):
            raise ValueError("Shift name must not be empty")
        self._register(_clean(name), self.shifts)

    def remove_shift(self, name: str) -> None:
        self._unregister(_clean(name), self.shifts, "shift")

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def to_mappings(self) -> tuple[dict[str, str], dict[str, str]]:
        """Return (person_to_group, person_to_shift), non-empty assignments only."""
        person_to_group = {p["name"]: p["group"] for p in self._people.values() if p["group"]}
        person_to_shift = {p["name"]: p["shift"] for p in self._people.values() if p["shift"]}
        return person_to_group, person_to_shift

    def duplicate_names_summary(self, records) -> dict:
        """Count how often each non-blank person name occurs in records."""
        counts: dict[str, int] = {}
        for record in records:
            name = _clean(record.get("person"))
            if name:
                counts[name] = counts.get(name, 0) + 1

        duplicates = sorted(
            ({"name": name, "count": count} for name, count in counts.items() if count > 1),
            key=lambda d: d["count"],
            reverse=True,
        )
        return {
            "total_unique_names": len(counts),
            "total_name_occurrences": sum(counts.values()),
            "duplicate_names": duplicates,
            "has_duplicates": bool(duplicates),
        }

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------
    def export_data(self) -> dict:
        return {
            "metadata": {
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "version": EXPORT_FORMAT_VERSION,
            },
            "people": self.people,
            "groups": [{"name": g} for g in self.groups],
            "shifts": [{"name": s} for s in self.shifts],
        }

    def import_data(self, data: Mapping) -> None:
        """Merge an export_data() document into this store.

        Sections that are missing or not lists are ignored.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Assignment data must be a JSON object")
        people = data.get("people")
        if isinstance(people, list):
            for person in people:
                if isinstance(person, Mapping) and _clean(person.get("name")):
                    self.add_person(person["name"], person.get("group", ""), person.get("shift", ""))

        for section, adder in (("groups", self.add_group), ("shifts", self.add_shift)):
            entries = data.get(section)
            if not isinstance(entries, list):
                continue
            for entry in entries:
                name = entry.get("name") if isinstance(entry, Mapping) else entry
                if _clean(name):
                    adder(name)

        logger.info(
            "Imported assignments: %d people, %d groups, %d shifts",
            len(self._people), len(self.groups), len(self.shifts),
        )

    def save(self, path) -> None:
        path = Path(path)
        try:
            path.write_text(json.dumps(self.export_data(), indent=2), encoding="utf-8")
        except OSError:
            logger.exception("Failed to save assignments to %s", path)
            raise
        logger.info("Saved assignments to %s", path)

    @classmethod
    def load(cls, path) -> "AssignmentStore":
        store = cls()
        path = Path(path)
        if not path.exists():
            logger.warning("Assignments file %s not found, starting empty", path)
            return store
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read assignments from %s", path)
            raise
        store.import_data(data)
        return store

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require(self, name: str) -> dict:
        person = self.find_person(name)
        if person is None:
            raise KeyError(name)
        return person

    @staticmethod
    def _register(name: str, names: list[str]) -> None:
        if name and name not in names:
            names.append(name)

    def _unregister(self, name: str, names: list[str], field: str) -> None:
        if name not in names:
            raise KeyError(name)
        names.remove(name)
        for person in self._people.values():
            if person[field] == name:
                person[field] = ""
