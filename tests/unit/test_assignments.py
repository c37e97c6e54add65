import json

import pytest

from weighbridge_analytics.assignments import AssignmentStore


@pytest.fixture()
def store() -> AssignmentStore:
    s = AssignmentStore()
    s.add_person("John", "Alpha", "Morning")
    s.add_person("Jane", "", "Night")
    s.add_person("Peter")
    return s


def test_to_mappings_only_includes_assigned(store):
    person_to_group, person_to_shift = store.to_mappings()
    assert person_to_group == {"John": "Alpha"}
    assert person_to_shift == {"John": "Morning", "Jane": "Night"}


def test_add_person_is_case_insensitive_and_keeps_first_spelling(store):
    store.add_person("  JANE ", "Beta")
    person = store.find_person("jane")

    assert person == {"name": "Jane", "group": "Beta", "shift": "Night"}
    assert len(store.people) == 3


def test_add_person_blank_assignment_keeps_existing(store):
    store.add_person("John", "", "")
    assert store.find_person("John")["group"] == "Alpha"


def test_add_person_rejects_empty_name(store):
    with pytest.raises(ValueError):
        store.add_person("   ")


def test_groups_and_shifts_registered_from_people(store):
    assert store.groups == ["Alpha"]
    assert store.shifts == ["Morning", "Night"]


def test_assign_and_clear(store):
    store.assign_group("Peter", "Bravo")
    store.assign_shift("Peter", "Afternoon")
    assert store.find_person("Peter")["group"] == "Bravo"
    assert "Bravo" in store.groups and "Afternoon" in store.shifts

    store.assign_group("Peter", "")
    person_to_group, _ = store.to_mappings()
    assert "Peter" not in person_to_group


def test_assign_unknown_person_raises(store):
    with pytest.raises(KeyError):
        store.assign_group("Nobody", "Alpha")
    with pytest.raises(KeyError):
        store.remove_person("Nobody")


def test_remove_group_clears_people(store):
    store.remove_group("Alpha")
    assert store.groups == []
    assert store.find_person("John")["group"] == ""
    with pytest.raises(KeyError):
        store.remove_group("Alpha")


def test_remove_shift_clears_people(store):
    store.remove_shift("Night")
    assert store.find_person("Jane")["shift"] == ""
    assert store.shifts == ["Morning"]


def test_add_group_and_shift_validation(store):
    store.add_group("Charlie")
    store.add_group("Charlie")
    assert store.groups.count("Charlie") == 1
    with pytest.raises(ValueError):
        store.add_shift("")


def test_register_people_skips_placeholders_and_known(store):
    records = [
        {"person": "John"},
        {"person": "N/A"},
        {"person": "", "raw": {"Driver Name": "Mary"}},
        {"person": "mary"},
        {"person": "unknown"},
    ]
    added = store.register_people(records)

    assert added == 1
    assert store.find_person("Mary")["name"] == "Mary"


def test_duplicate_names_summary(store):
    records = [{"person": "A"}, {"person": "B"}, {"person": " A "}, {"person": ""}, {"person": "B"}, {"person": "B"}]
    summary = store.duplicate_names_summary(records)

    assert summary == {
        "total_unique_names": 2,
        "total_name_occurrences": 5,
        "duplicate_names": [{"name": "B", "count": 3}, {"name": "A", "count": 2}],
        "has_duplicates": True,
    }


def test_export_import_roundtrip(store):
    data = store.export_data()
    assert data["metadata"]["version"] == "1.0"
    assert "exported_at" in data["metadata"]

    restored = AssignmentStore()
    restored.import_data(json.loads(json.dumps(data)))

    assert restored.to_mappings() == store.to_mappings()
    assert restored.groups == store.groups
    assert restored.shifts == store.shifts


def test_import_of_exported_file_merges_into_existing_store(store):
    payload = json.dumps(store.export_data(), indent=2).encode("utf-8")

    other = AssignmentStore()
    other.add_person("Mary", "Delta", "Night")
    other.add_person("john", "Bravo")
    other.import_data(json.loads(payload.decode("utf-8")))

    person_to_group, person_to_shift = other.to_mappings()
    assert person_to_group == {"Mary": "Delta", "john": "Alpha"}
    assert person_to_shift == {"Mary": "Night", "john": "Morning", "Jane": "Night"}
    assert other.groups == ["Delta", "Bravo", "Alpha"]


def test_import_ignores_malformed_sections():
    s = AssignmentStore()
    s.import_data({"people": "nope", "groups": [{"name": "Alpha"}, "Bravo", {"x": 1}], "shifts": None})
    assert s.people == []
    assert s.groups == ["Alpha", "Bravo"]

    with pytest.raises(ValueError):
        s.import_data(["not", "a", "mapping"])


def test_save_and_load(store, tmp_path):
    path = tmp_path / "assignments.json"
    store.save(path)

    loaded = AssignmentStore.load(path)
    assert loaded.to_mappings() == store.to_mappings()


def test_load_missing_file_returns_empty_store(tmp_path):
    loaded = AssignmentStore.load(tmp_path / "missing.json")
    assert loaded.people == []
    assert loaded.to_mappings() == ({}, {})
