"""
Tests for the PowerShell lexical helpers.
"""

import pytest

from upcoming_changes.components.powershell import (
    find_closing,
    parse_literal,
    skip_string,
    split_top_level,
    strip_comments,
)
from upcoming_changes.exceptions import ScriptParseError


class TestStripComments:
    """Tests for comment removal."""

    def test_line_and_block_comments(self):
        text = "$a = 1 # note\n<# block\nmore #>$b = 2\n"
        result = strip_comments(text)

        assert "note" not in result
        assert "block" not in result
        assert "$b = 2" in result
        assert result.count("\n") == text.count("\n")

    def test_hash_inside_string_is_kept(self):
        text = "$a = 'not # a comment' # real comment"
        assert strip_comments(text).rstrip() == "$a = 'not # a comment'"

    def test_hash_inside_word_is_kept(self):
        assert strip_comments("Write-Host a#b") == "Write-Host a#b"


class TestBrackets:
    """Tests for bracket matching and splitting."""

    def test_find_closing_skips_nested_and_strings(self):
        text = "(a [b] ')' {c})"
        assert find_closing(text, 0) == len(text) - 1

    def test_find_closing_unbalanced(self):
        with pytest.raises(ScriptParseError):
            find_closing("(a]", 0)

    def test_find_closing_unterminated(self):
        with pytest.raises(ScriptParseError):
            find_closing("(a (b)", 0)

    def test_split_top_level(self):
        assert split_top_level("a, @(1,2), 'x,y'") == ["a", " @(1,2)", " 'x,y'"]


class TestSkipString:
    """Tests for string literal skipping."""

    def test_quotes_inside_subexpression(self):
        text = '"x $($A.Split(")")[0]) y"; $next'
        assert skip_string(text, 0) == text.index(";")

    def test_subexpression_brackets_do_not_leak(self):
        text = '{ Write-Verbose "x $($A.Split(")")[0]) y" }'
        assert find_closing(text, 0) == len(text) - 1

    def test_expandable_here_string_subexpression(self):
        text = '@"\n$($a.Trim(")"))\n"@'
        assert skip_string(text, 0) == len(text)

    def test_empty_here_string(self):
        assert skip_string('@"\n"@ tail', 0) == 5

    def test_single_quoted_has_no_subexpressions(self):
        assert skip_string("'$(' + ')'", 0) == 4


class TestParseLiteral:
    """Tests for literal parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("'It''s'", "It's"),
            ('"tab`there"', "tab\there"),
            ('"say ""hi"""', 'say "hi"'),
            ("$true", True),
            ("$False", False),
            ("$null", None),
            ("$PSScriptRoot", "$PSScriptRoot"),
            ("42", 42),
            ("-1", -1),
            ("0x10", 16),
            ("1.5", 1.5),
            ("[string]", "string"),
            ("[int]'5'", "5"),
            ("Get-AzWidget", "Get-AzWidget"),
            ("@()", []),
            ("('a')", "a"),
        ],
    )
    def test_scalars(self, text, expected):
        assert parse_literal(text) == expected

    def test_comma_list(self):
        assert parse_literal("'Core', 'Desktop'") == ["Core", "Desktop"]

    def test_array(self):
        assert parse_literal("@(\n  'a'\n  'b', 3\n)") == ["a", "b", 3]

    def test_hashtable(self):
        text = """@{
  ModuleVersion = '2.1.0'; Tags = 'a', 'b'
  'Quoted Key' = @{ Nested = $true }
}"""
        assert parse_literal(text) == {
            "ModuleVersion": "2.1.0",
            "Tags": ["a", "b"],
            "Quoted Key": {"Nested": True},
        }

    def test_here_string(self):
        assert parse_literal("@'\nline one\nline two\n'@") == "line one\nline two"

    def test_script_block_is_kept_as_text(self):
        assert parse_literal("{ $_ -gt 0 }") == "{ $_ -gt 0 }"

    def test_trailing_text_fails(self):
        with pytest.raises(ScriptParseError, match="unexpected text"):
            parse_literal("'a' 'b'")

    def test_unterminated_string_fails(self):
        with pytest.raises(ScriptParseError, match="unterminated"):
            parse_literal("'abc")

    def test_missing_value_fails(self):
        with pytest.raises(ScriptParseError):
            parse_literal("@{ A = }")
