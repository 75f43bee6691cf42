"""
Tests for non-destructive report merging.
"""

import pytest

from upcoming_changes.util.merge import merge_breaking_changes


def test_new_keys_are_copied():
    """Test that merged values are copies, not shared references"""
    source = {"Get-AzWidget": {"AllParameterSets": {"CmdletBreakingChange": ["a"]}}}
    target = {}

    merge_breaking_changes(target, source)
    target["Get-AzWidget"]["AllParameterSets"]["CmdletBreakingChange"].append("b")

    assert source == {"Get-AzWidget": {"AllParameterSets": {"CmdletBreakingChange": ["a"]}}}


def test_lists_are_appended():
    target = {"CmdletBreakingChange": ["first"]}
    merge_breaking_changes(target, {"CmdletBreakingChange": ["second"]})

    assert target == {"CmdletBreakingChange": ["first", "second"]}


def test_differing_messages_are_joined():
    """Test that a second message for the same parameter never replaces the first"""
    target = {"ParameterBreakingChange": {"Name": "old message"}}
    merge_breaking_changes(target, {"ParameterBreakingChange": {"Name": "new message"}})

    assert target["ParameterBreakingChange"]["Name"] == "old message\nnew message"


def test_identical_messages_are_kept_once():
    target = {"Name": "same"}
    merge_breaking_changes(target, {"Name": "same"})

    assert target == {"Name": "same"}


def test_nested_merge_keeps_both_sides():
    target = {
        "Get-AzWidget": {
            "AllParameterSets": {"ParameterBreakingChange": {"Name": "a"}},
        }
    }
    source = {
        "Get-AzWidget": {
            "AllParameterSets": {"CmdletBreakingChange": ["c"]},
            "ByName": {"CmdletBreakingChange": ["d"]},
        },
        "Remove-AzWidget": {"AllParameterSets": {"CmdletBreakingChange": ["e"]}},
    }

    result = merge_breaking_changes(target, source)

    assert result is target
    assert target == {
        "Get-AzWidget": {
            "AllParameterSets": {
                "ParameterBreakingChange": {"Name": "a"},
                "CmdletBreakingChange": ["c"],
            },
            "ByName": {"CmdletBreakingChange": ["d"]},
        },
        "Remove-AzWidget": {"AllParameterSets": {"CmdletBreakingChange": ["e"]}},
    }


def test_mismatched_types_fail():
    with pytest.raises(TypeError, match="CmdletBreakingChange"):
        merge_breaking_changes({"CmdletBreakingChange": ["a"]}, {"CmdletBreakingChange": "b"})
