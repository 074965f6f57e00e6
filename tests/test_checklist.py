from claimdesk.checklist import (
    CHECKLIST_LABELS,
    REQUIRED_ITEMS,
    ChecklistItem,
    evaluate_checklist,
)


def _all_true():
    return {item.value: True for item in REQUIRED_ITEMS}


class TestChecklist:
    def test_exactly_twelve_items_in_order(self):
        assert [item.value for item in REQUIRED_ITEMS] == [
            "appointment",
            "personalDetails",
            "treatment",
            "amount",
            "complains",
            "vitalSign",
            "consentForm",
            "allergy",
            "invoiceDate",
            "familyDetails",
            "diagnosis",
            "startDate",
        ]

    def test_every_item_has_label(self):
        for item in ChecklistItem:
            assert CHECKLIST_LABELS[item]

    def test_complete(self):
        result = evaluate_checklist(_all_true())
        assert result.complete
        assert result.missing_keys == []

    def test_eleven_of_twelve_is_incomplete(self):
        payload = _all_true()
        payload["diagnosis"] = False
        result = evaluate_checklist(payload)
        assert not result.complete
        assert result.missing_keys == ["diagnosis"]
        assert "Diagnosis" in result.message

    def test_missing_key_is_reported(self):
        payload = _all_true()
        del payload["consentForm"]
        del payload["startDate"]
        assert evaluate_checklist(payload).missing_keys == ["consentForm", "startDate"]

    def test_misspelt_key_does_not_count(self):
        payload = _all_true()
        del payload["vitalSign"]
        payload["vitalSigns"] = True
        assert evaluate_checklist(payload).missing_keys == ["vitalSign"]

    def test_truthy_non_bool_values_do_not_count(self):
        payload = _all_true()
        payload["allergy"] = "true"
        payload["amount"] = 1
        assert evaluate_checklist(payload).missing_keys == ["amount", "allergy"]

    def test_unknown_keys_ignored(self):
        payload = _all_true()
        payload["somethingNew"] = False
        assert evaluate_checklist(payload).complete

    def test_none_payload_misses_everything(self):
        assert evaluate_checklist(None).missing == REQUIRED_ITEMS

    def test_all_false_misses_everything(self):
        payload = {item.value: False for item in REQUIRED_ITEMS}
        assert evaluate_checklist(payload).missing == REQUIRED_ITEMS
