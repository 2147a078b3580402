import re

import bleach

# <script>/<style> 태그는 내용까지 함께 제거합니다.
_SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)[^>]*?>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_OCTET_PATTERN = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_PATTERN = re.compile(r"\s+")

def sanitize_text_field(value) -> str:
    """
    사용자 입력을 한 줄짜리 평문으로 정리합니다.

    script/style 블록을 내용째 지우고, 나머지 HTML 태그는 bleach로 제거합니다.
    (남은 '<' 같은 문자는 bleach가 HTML 엔티티로 바꿉니다.)
    이후 퍼센트 인코딩된 옥텟을 제거하고, 줄바꿈/탭을 포함한 연속 공백을
    공백 하나로 합친 뒤 앞뒤 공백을 제거합니다. None은 빈 문자열이 됩니다.
    """
    if value is None:
        return ""
    text = _SCRIPT_STYLE_PATTERN.sub("", str(value))
    text = bleach.clean(text, tags=[], attributes={}, strip=True, strip_comments=True)
    text = _OCTET_PATTERN.sub("", text)
    text = _WHITESPACE_PATTERN.sub(" ", text)
    return text.strip()
