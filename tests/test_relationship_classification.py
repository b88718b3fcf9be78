"""Tests for relationship type classification, validation and duplicates."""

import pytest

from timeline_editors.errors import (
    InvalidCustomTypeError, MissingCustomTypeError, MissingTypeError
)
from timeline_editors.models.relationship import RelationshipRecord, clamp_strength
from timeline_editors.relationships import (
    BIDIRECTIONAL_TYPES, CUSTOM_TYPES, RELATIONSHIP_TYPES, apply_directionality, check_custom_type,
    classify_directionality, custom_type_problem, duplicate_prompt, find_duplicates,
    is_known_relationship_type, relationship_type_label, resolve_duplicate_conflict,
    validate_candidate
)


def make_record(relationship_type="friend", c1=1, c2=2, custom=None, **kwargs):
    return RelationshipRecord(
        character_1_id=c1,
        character_2_id=c2,
        relationship_type=relationship_type,
        timeline_id=7,
        custom_relationship_type=custom,
        **kwargs
    )


@pytest.mark.parametrize("relationship_type", sorted(BIDIRECTIONAL_TYPES))
def test_symmetric_types_are_bidirectional(relationship_type):
    assert classify_directionality(relationship_type) is True
    assert apply_directionality(relationship_type, False) is True


@pytest.mark.parametrize("relationship_type", sorted(RELATIONSHIP_TYPES - BIDIRECTIONAL_TYPES - CUSTOM_TYPES))
def test_directed_types_are_not_bidirectional(relationship_type):
    assert classify_directionality(relationship_type) is False
    assert apply_directionality(relationship_type, True) is False


@pytest.mark.parametrize("relationship_type", ["custom", "other", "", None, "dragon"])
def test_custom_and_unknown_types_are_not_bidirectional(relationship_type):
    assert classify_directionality(relationship_type) is False


def test_bidirectional_types_are_known_types():
    assert BIDIRECTIONAL_TYPES <= RELATIONSHIP_TYPES
    assert is_known_relationship_type("great-great-grandchild")
    assert not is_known_relationship_type("dragon")


def test_apply_directionality_forces_flag_for_known_types():
    assert apply_directionality("sibling", False) is True
    assert apply_directionality("parent", True) is False


@pytest.mark.parametrize("relationship_type", ["", None, "custom", "other"])
def test_apply_directionality_keeps_user_choice(relationship_type):
    assert apply_directionality(relationship_type, True) is True
    assert apply_directionality(relationship_type, False) is False


def test_validate_requires_type():
    with pytest.raises(MissingTypeError) as excinfo:
        validate_candidate(make_record(relationship_type=""))
    assert excinfo.value.message == "Please select a relationship type."
    assert excinfo.value.field == "relationship_type"


@pytest.mark.parametrize("relationship_type", ["custom", "other"])
def test_validate_requires_custom_text(relationship_type):
    with pytest.raises(MissingCustomTypeError) as excinfo:
        validate_candidate(make_record(relationship_type=relationship_type, custom=None))
    assert excinfo.value.field == "custom_relationship_type"


def test_validate_accepts_known_and_custom_types():
    validate_candidate(make_record("parent"))
    validate_candidate(make_record("custom", custom="Frenemies"))


def test_custom_type_problem_checks_length():
    assert custom_type_problem("") is None
    assert custom_type_problem("ok") is None
    assert "at least 2" in custom_type_problem("x")
    assert "50 characters or less" in custom_type_problem("x" * 51)


def test_check_custom_type_only_applies_to_custom_types():
    check_custom_type(make_record("friend", custom="x"))
    with pytest.raises(InvalidCustomTypeError):
        check_custom_type(make_record("other", custom="x"))


def test_duplicates_match_same_direction_and_type():
    existing = [
        make_record("rival", c1=1, c2=2),
        make_record("rival", c1=2, c2=1),
        make_record("friend", c1=1, c2=2),
    ]
    duplicates = find_duplicates(make_record("rival", c1=1, c2=2), existing)
    assert duplicates == [existing[0]]


def test_reverse_pair_is_not_a_duplicate():
    existing = [make_record("sibling", c1=2, c2=1, is_bidirectional=True)]
    assert find_duplicates(make_record("sibling", c1=1, c2=2), existing) == []


def test_custom_text_distinguishes_duplicates():
    existing = [make_record("custom", custom="Frenemies")]
    assert find_duplicates(make_record("custom", custom="Frenemies"), existing) == existing
    assert find_duplicates(make_record("custom", custom="Pen pals"), existing) == []


def test_resolve_duplicate_conflict_only_asks_when_needed():
    asked = []

    def confirm():
        asked.append(True)
        return False

    assert resolve_duplicate_conflict([], confirm) is True
    assert asked == []
    assert resolve_duplicate_conflict([make_record()], confirm) is False
    assert asked == [True]
    assert resolve_duplicate_conflict([make_record()], lambda: True) is True


def test_labels_and_prompt():
    assert relationship_type_label("great-great-grandparent") == "great great grandparent"
    prompt = duplicate_prompt(make_record("best-friend"), "Alice", "Bob")
    assert '"best friend"' in prompt
    assert "between Alice and Bob" in prompt
    custom_prompt = duplicate_prompt(make_record("custom", custom="Frenemies"), "Alice", "Bob")
    assert '"Frenemies"' in custom_prompt


@pytest.mark.parametrize("value, expected", [
    (None, 50), ("", 50), ("abc", 50), (0, 0), (-5, 0), (120, 100), ("75", 75),
])
def test_clamp_strength(value, expected):
    assert clamp_strength(value) == expected
