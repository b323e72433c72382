from moltly.services.normalize.records import (
    apply_patch,
    normalize_breeding_entry,
    normalize_health_entry,
    normalize_molt_entry,
    normalize_stack,
)


def test_molt_defaults_stage_and_kind():
    result = normalize_molt_entry({"species": "Brachypelma hamorii", "date": "2024-01-01"})
    assert result.ok
    assert result.record["entryType"] == "molt"
    assert result.record["stage"] == "Molt"
    assert result.record["date"] == "2024-01-01"
    assert result.record["attachments"] == []


def test_molt_requires_species():
    result = normalize_molt_entry({"entryType": "molt", "date": "2024-01-01"})
    assert not result.ok
    assert result.issues[0].field == "species"


def test_missing_date_is_reported_not_raised():
    result = normalize_molt_entry({"species": "G. pulchra"})
    assert not result.ok
    assert [i.field for i in result.issues] == ["date"]


def test_non_object_input_is_rejected():
    result = normalize_molt_entry(["not", "a", "record"])
    assert not result.ok
    assert result.issues[0].message == "Expected a JSON object."


def test_datetime_is_reduced_to_date():
    result = normalize_molt_entry({"species": "x", "date": "2024-03-05T22:10:00Z"})
    assert result.record["date"] == "2024-03-05"


def test_feeding_drops_stage_and_keeps_feeding_fields():
    result = normalize_molt_entry({
        "entryType": "FEEDING",
        "date": "2024-01-02",
        "stage": "Pre-molt",
        "feedingPrey": " cricket ",
        "feedingOutcome": "Ate",
        "feedingAmount": "2",
    })
    record = result.record
    assert record["entryType"] == "feeding"
    assert "stage" not in record
    assert record["feedingPrey"] == "cricket"
    assert record["feedingOutcome"] == "Ate"


def test_water_entry_drops_feeding_fields():
    record = normalize_molt_entry({
        "entryType": "water",
        "date": "2024-01-02",
        "feedingPrey": "roach",
    }).record
    assert "feedingPrey" not in record
    assert "stage" not in record


def test_custom_entry_type_is_kept_verbatim():
    record = normalize_molt_entry({"entryType": " Rehouse ", "date": "2024-01-02"}).record
    assert record["entryType"] == "Rehouse"


def test_entry_type_longer_than_32_chars_is_rejected():
    result = normalize_molt_entry({"entryType": "x" * 33, "date": "2024-01-02"})
    assert not result.ok
    assert result.issues[0].field == "entryType"


def test_lenient_coercions():
    record = normalize_molt_entry({
        "species": "x",
        "date": "2024-01-01",
        "stage": "Sideways",
        "oldSize": "2.5",
        "newSize": "huge",
        "humidity": float("nan"),
        "temperatureUnit": "K",
        "notes": "   ",
        "reminderDate": "someday",
    }).record
    assert record["stage"] == "Molt"
    assert record["oldSize"] == 2.5
    for absent in ("newSize", "humidity", "temperatureUnit", "notes", "reminderDate"):
        assert absent not in record


def test_output_never_contains_none():
    record = normalize_molt_entry({"species": "x", "date": "2024-01-01", "notes": None}).record
    assert None not in record.values()


def test_normalize_is_idempotent():
    raw = {
        "entryType": "feeding",
        "date": "2024-01-02T08:00:00Z",
        "feedingPrey": "cricket",
        "temperature": "24",
        "attachments": [{"id": "a1", "name": "p.jpg", "url": "/uploads/1/p.jpg", "type": "image/jpeg"}],
    }
    once = normalize_molt_entry(raw).record
    assert normalize_molt_entry(once).record == once


def test_health_normalize_is_idempotent():
    raw = {
        "date": "2024-03-01T10:00:00Z",
        "weight": "3.2",
        "temperature": 75,
        "temperatureUnit": "F",
        "condition": "bogus",
        "followUpDate": "2024-03-08",
        "attachments": [{"id": "h1", "url": "https://cdn.example.com/moltly/1/h.png"}],
    }
    once = normalize_health_entry(raw).record
    assert once["weight"] == 3.2
    assert once["weightUnit"] == "g"
    assert once["condition"] == "Stable"
    assert normalize_health_entry(once).record == once


def test_health_weight_unit_kept_or_defaulted():
    assert normalize_health_entry({"date": "2024-03-01", "weight": 1, "weightUnit": "oz"}).record["weightUnit"] == "oz"
    assert normalize_health_entry({"date": "2024-03-01", "weight": 1, "weightUnit": "kg"}).record["weightUnit"] == "g"
    assert "weightUnit" not in normalize_health_entry({"date": "2024-03-01"}).record


def test_breeding_normalize_is_idempotent():
    raw = {
        "pairingDate": "2024-01-10",
        "femaleSpecimen": " Rosie ",
        "status": "Successful",
        "eggSacStatus": "nonsense",
        "eggSacCount": "2",
        "attachments": [{"id": "b1", "url": "/uploads/1/sac.jpg", "type": "image/jpeg"}],
    }
    once = normalize_breeding_entry(raw).record
    assert once["femaleSpecimen"] == "Rosie"
    assert once["eggSacStatus"] == "Not Laid"
    assert normalize_breeding_entry(once).record == once


def test_stack_normalize_is_idempotent():
    once = normalize_stack({"name": " Care ", "tags": ["heat"], "notes": [{"content": "x", "title": ""}], "isPublic": "yes"}).record
    assert once["name"] == "Care"
    assert "isPublic" not in once
    assert normalize_stack(once).record == once


def test_data_url_is_dropped_unless_kept():
    raw = {
        "species": "x",
        "date": "2024-01-01",
        "attachments": [{"id": "a", "url": "", "dataUrl": "data:image/png;base64,AAAA"}],
    }
    assert "dataUrl" not in normalize_molt_entry(raw).record["attachments"][0]
    kept = normalize_molt_entry(raw, keep_data_urls=True).record
    assert kept["attachments"][0]["dataUrl"] == "data:image/png;base64,AAAA"


def test_attachment_list_skips_non_objects():
    raw = {"species": "x", "date": "2024-01-01", "attachments": ["junk", {"id": "ok", "url": "/uploads/1/a.png"}]}
    assert [a["id"] for a in normalize_molt_entry(raw).record["attachments"]] == ["ok"]


def test_health_defaults_condition():
    record = normalize_health_entry({"date": "2024-02-01", "condition": "Unknown"}).record
    assert record["condition"] == "Stable"


def test_breeding_defaults_and_integer_counts():
    record = normalize_breeding_entry({"pairingDate": "2024-02-01", "eggSacCount": "3", "slingCount": 2.0}).record
    assert record["status"] == "Planned"
    assert record["eggSacStatus"] == "Not Laid"
    assert record["eggSacCount"] == 3
    assert record["slingCount"] == 2


def test_breeding_requires_pairing_date():
    result = normalize_breeding_entry({"status": "Planned"})
    assert not result.ok
    assert result.issues[0].field == "pairingDate"


def test_stack_requires_name():
    result = normalize_stack({"description": "no name"})
    assert not result.ok
    assert result.issues[0].field == "name"


def test_stack_notes_get_defaults():
    record = normalize_stack({
        "name": "Substrate",
        "tags": ["a", 3, " "],
        "notes": [{"content": "coco fiber"}, "junk"],
    }).record
    assert record["tags"] == ["a"]
    assert len(record["notes"]) == 1
    note = record["notes"][0]
    assert note["title"] == "Untitled note"
    assert note["id"]
    assert note["createdAt"].endswith("Z")
    assert note["updatedAt"] == note["createdAt"]
    assert normalize_stack(record).record == record


def test_patch_only_touches_sent_keys():
    current = normalize_molt_entry({"species": "x", "date": "2024-01-01", "notes": "first"}).record
    patched = apply_patch(normalize_molt_entry, current, {"notes": "second"}).record
    assert patched["notes"] == "second"
    assert patched["species"] == "x"
    assert patched["stage"] == "Molt"


def test_patch_null_clears_field():
    current = normalize_molt_entry({"species": "x", "date": "2024-01-01", "notes": "first"}).record
    patched = apply_patch(normalize_molt_entry, current, {"notes": None}).record
    assert "notes" not in patched


def test_patch_kind_change_clears_wrong_kind_fields():
    current = normalize_molt_entry({"species": "x", "date": "2024-01-01", "stage": "Post-molt"}).record
    patched = apply_patch(normalize_molt_entry, current, {"entryType": "feeding", "feedingPrey": "roach"}).record
    assert "stage" not in patched
    assert patched["feedingPrey"] == "roach"


def test_patch_ignores_read_only_keys():
    current = {"id": "7", "createdAt": "2024-01-01T00:00:00.000Z", "species": "x", "date": "2024-01-01"}
    patched = apply_patch(normalize_molt_entry, current, {"id": "99", "userId": "2"}).record
    assert "id" not in patched
    assert "userId" not in patched
