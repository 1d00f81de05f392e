"""Unit tests for CLI logic functions."""

import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from voicecache.cli import process_text_input


def test_process_text_input_with_valid_text() -> None:
    assert process_text_input("Hello world") == "Hello world"


def test_process_text_input_preserves_whitespace() -> None:
    """Test that surrounding whitespace is part of the cached text."""
    assert process_text_input("  Hello   world  ") == "  Hello   world  "


def test_process_text_input_with_multiline() -> None:
    text = "Line 1\nLine 2\nLine 3"
    assert process_text_input(text) == text


@pytest.mark.parametrize("text", [None, "", "   "])
def test_process_text_input_without_text_raises(text) -> None:
    with pytest.raises(ValueError, match="No text provided"):
        process_text_input(text)
