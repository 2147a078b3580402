# tests/utils/test_text_sanitizer.py
import pytest
from src.utils.text_sanitizer import sanitize_text_field

@pytest.mark.parametrize("raw, expected", [
    ("hello", "hello"),
    ("  padded  ", "padded"),
    ("line one\nline two", "line one line two"),
    ("tabs\tand\r\nbreaks", "tabs and breaks"),
    ("<b>bold</b> move", "bold move"),
    ('<a href="http://x.test" onclick="go()">link</a>', "link"),
    ("1 < 2", "1 &lt; 2"),
    ("100%20off", "100off"),
    ("   ", ""),
    ("", ""),
    (None, ""),
    (42, "42"),
])
def test_sanitize_text_field(raw, expected):
    """입력이 한 줄짜리 평문으로 정리되는지 테스트합니다."""
    assert sanitize_text_field(raw) == expected

@pytest.mark.parametrize("raw", [
    "<script>alert(1)</script>hi",
    "<SCRIPT type='text/javascript'>\nalert(1)\n</SCRIPT>hi",
    "<style>body { color: red }</style>hi",
])
def test_script_and_style_bodies_are_removed(raw):
    """script/style 태그는 안의 내용까지 제거되는지 테스트합니다."""
    assert sanitize_text_field(raw) == "hi"

def test_only_script_becomes_empty():
    assert sanitize_text_field("<script>alert(1)</script>") == ""
