from src.client.records import (
    FIELD_ALIASES,
    build_record,
    extract_contact,
    reconcile,
    translate_vehicle_type,
)


def test_reconcile_prefers_first_present_alias():
    out = reconcile({"phone": "  ", "phoneNumber": "555"}, FIELD_ALIASES)
    assert out["phone"] == "555"
    assert out["email"] is None


def test_build_record_reconciles_aliases():
    record = build_record(
        {
            "id": 12,
            "firstName": "Ayşe",
            "lastName": "Yılmaz",
            "email": " ayse@example.com ",
            "phoneNumber": "5551112233",
            "city": "İzmir",
            "createdAt": "2024-05-01T10:00:00Z",
            "status": "APPROVED",
            "review": {
                "reviewNotes": "aradım",
                "callDuration": 450,
                "callDurationFormatted": "7:30",
                "reviewedAt": "2024-05-02T09:00:00Z",
            },
        }
    )

    assert record.id == "12"
    assert record.name == "Ayşe Yılmaz"
    assert record.email == "ayse@example.com"
    assert record.phone == "5551112233"
    assert record.city == "İzmir"
    assert record.created_at == "2024-05-01T10:00:00Z"
    assert record.status == "approved"
    assert record.review is not None
    assert record.review.notes == "aradım"
    assert record.review.call_duration_seconds == 450
    assert record.review.call_duration_formatted == "7:30"
    assert record.review.reviewed_at == "2024-05-02T09:00:00Z"


def test_status_falls_back_to_review_then_pending():
    assert build_record({"review": {"status": "rejected"}}).status == "rejected"
    assert build_record({}).status == "pending"
    assert build_record({"status": "archived"}).status == "pending"


def test_review_is_none_without_review_fields():
    assert build_record({"id": 1, "name": "x"}).review is None


def test_documents_are_collected():
    record = build_record(
        {
            "id": 3,
            "vehicleDocumentsUrl": "https://cdn.example.com/v.pdf",
            "carrier_documents_url": "https://cdn.example.com/c.pdf",
            "extraDocumentUrl": "http://cdn.example.com/e.pdf",
            "website": "not a url",
        }
    )

    assert [(d.label, d.url) for d in record.documents] == [
        ("Araç Belgeleri", "https://cdn.example.com/v.pdf"),
        ("Taşıyıcı Belgeleri", "https://cdn.example.com/c.pdf"),
        ("Extra Document", "http://cdn.example.com/e.pdf"),
    ]


def test_extract_contact_from_raw_mapping():
    contact = extract_contact({"name": "Veli", "email": "v@example.com", "phone": "1"})
    assert (contact.name, contact.email, contact.phone) == ("Veli", "v@example.com", "1")
    assert extract_contact(None).name == ""


def test_translate_vehicle_type():
    assert translate_vehicle_type("Pickup") == "Kamyonet"
    assert translate_vehicle_type("tractor") == "tractor"
    assert translate_vehicle_type(None) == "-"


def test_non_mapping_payload_gives_empty_record():
    record = build_record(["not", "a", "record"])
    assert record.id is None
    assert record.contact.name == ""
