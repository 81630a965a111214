import pytest

from donor_locator.utils.blood import BLOOD_GROUPS, normalize_blood_group


@pytest.mark.parametrize("group", BLOOD_GROUPS)
def test_canonical_groups_pass_through(group):
    assert normalize_blood_group(group) == group


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("ab+", "AB+"),
        (" o - ", "O-"),
        ("A pos", "A+"),
        ("B neg", "B-"),
        ("O+ve", "O+"),
        ("ab-ve", "AB-"),
        ("O Negative", "O-"),
        ("a positive", "A+"),
    ],
)
def test_spelling_variants_are_normalized(raw, expected):
    assert normalize_blood_group(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "C+", "A", "AB", "ABO+", "O++", 7])
def test_unrecognized_values_return_none(raw):
    assert normalize_blood_group(raw) is None
