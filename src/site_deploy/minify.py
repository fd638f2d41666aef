"""Minifiers for the file kinds published by the site.

Minification is conservative: line structure of scripts is kept so that
automatic semicolon insertion still works, and `<pre>`/`<textarea>` content
is never touched.
"""

import re
from enum import Enum
from pathlib import PurePath

from site_deploy.exceptions import MinifyError


class FileKind(str, Enum):
    SCRIPT = "script"
    HTML = "html"
    CSS = "css"
    MARKDOWN = "markdown"
    OTHER = "other"

    @classmethod
    def from_path(cls, path: "str | PurePath") -> "FileKind":
        suffix = PurePath(path).suffix.lower()
        return _KINDS_BY_SUFFIX.get(suffix, cls.OTHER)


_KINDS_BY_SUFFIX = {
    ".js": FileKind.SCRIPT,
    ".mjs": FileKind.SCRIPT,
    ".html": FileKind.HTML,
    ".htm": FileKind.HTML,
    ".css": FileKind.CSS,
    ".md": FileKind.MARKDOWN,
}


class MinifyProfile(str, Enum):
    """How aggressively to minify.

    FULL strips comments and collapses whitespace, COMMENTS only strips
    comments and blank lines.
    """

    FULL = "full"
    COMMENTS = "comments"


CSS_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
HTML_COMMENT = re.compile(r"<!--(?!\[if).*?-->", re.DOTALL)
RAW_BLOCK = re.compile(
    r"(<(script|style|pre|textarea)\b[^>]*>)(.*?)(</\2\s*>)", re.DOTALL | re.IGNORECASE
)


# A `/` after one of these starts a regular expression literal, not a division
REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%<>~^")
REGEX_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}


def _is_identifier_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


def _regex_end(content: str, start: int) -> int:
    """Index of the closing `/` of a regex literal opened at `start`, or -1."""
    in_class = False
    end = start + 1
    while end < len(content):
        char = content[end]
        if char == "\\":
            end += 2
            continue
        if char == "\n":
            return -1
        if in_class:
            if char == "]":
                in_class = False
        elif char == "[":
            in_class = True
        elif char == "/":
            return end
        end += 1
    return -1


def strip_script_comments(content: str) -> str:
    """
    Remove `//` and `/* */` comments from script source.

    String, template and regular expression literals are copied verbatim. A
    `/` is read as the start of a regex when it follows an operator, an
    opening bracket, a keyword such as `return`, or nothing at all.

    Raises:
        MinifyError: If a block comment or literal is not terminated
    """
    out = []
    i = 0
    length = len(content)
    # Last significant character emitted and the identifier ending there
    previous = ""
    word = ""
    after_space = False
    while i < length:
        char = content[i]
        pair = content[i : i + 2]

        if char in "'\"`":
            end = i + 1
            while end < length and content[end] != char:
                if content[end] == "\\":
                    end += 1
                elif content[end] == "\n" and char != "`":
                    break
                end += 1
            if end >= length or content[end] != char:
                raise MinifyError(f"Unterminated string literal at offset {i}")
            out.append(content[i : end + 1])
            previous, word = char, ""
            i = end + 1
        elif pair == "//":
            end = content.find("\n", i)
            i = length if end == -1 else end
        elif pair == "/*":
            end = content.find("*/", i + 2)
            if end == -1:
                raise MinifyError(f"Unterminated block comment at offset {i}")
            i = end + 2
        elif char == "/" and (
            not previous or previous in REGEX_PRECEDERS or word in REGEX_KEYWORDS
        ):
            end = _regex_end(content, i)
            if end == -1:
                # No closing slash on the line, so it was a division after all
                end = i
            out.append(content[i : end + 1])
            previous, word = "/", ""
            i = end + 1
        else:
            out.append(char)
            if char.isspace():
                after_space = True
            else:
                if _is_identifier_char(char):
                    continues = _is_identifier_char(previous) and not after_space
                    word = word + char if continues else char
                else:
                    word = ""
                previous = char
                after_space = False
            i += 1
    return "".join(out)


def _drop_blank_lines(content: str, strip: bool) -> str:
    lines = [line.strip() if strip else line.rstrip() for line in content.splitlines()]
    return "\n".join(line for line in lines if line.strip())


def minify_script(content: str, profile: MinifyProfile = MinifyProfile.FULL) -> str:
    content = strip_script_comments(content)
    if profile == MinifyProfile.FULL:
        return _drop_blank_lines(content, strip=True)
    return _drop_blank_lines(content, strip=False) + "\n"


def minify_css(content: str, profile: MinifyProfile = MinifyProfile.FULL) -> str:
    content = CSS_COMMENT.sub("", content)
    if profile == MinifyProfile.COMMENTS:
        return _drop_blank_lines(content, strip=False) + "\n"

    content = re.sub(r"\s+", " ", content)
    content = re.sub(r"\s*([{}:;,>])\s*", r"\1", content)
    content = content.replace(";}", "}")
    return content.strip()


def _minify_html_text(text: str, profile: MinifyProfile) -> str:
    text = HTML_COMMENT.sub("", text)
    if profile == MinifyProfile.FULL:
        text = re.sub(r">\s+<", "><", text)
        text = re.sub(r"\s+", " ", text)
    return text


def minify_html(content: str, profile: MinifyProfile = MinifyProfile.FULL) -> str:
    """
    Minify an HTML document.

    CSS block comments are always removed, the HTML minifier only knows
    about `<!-- -->`. Inline `<style>` and `<script>` blocks are minified with
    the CSS and script minifiers.
    """
    content = CSS_COMMENT.sub("", content)

    parts = []
    last = 0
    for match in RAW_BLOCK.finditer(content):
        parts.append(_minify_html_text(content[last : match.start()], profile))
        open_tag, tag, body, close_tag = match.groups()
        tag = tag.lower()
        if tag == "style" and profile == MinifyProfile.FULL:
            body = minify_css(body, profile)
        elif tag == "script" and body.strip():
            body = minify_script(body, profile)
        parts.append(f"{open_tag}{body}{close_tag}")
        last = match.end()
    parts.append(_minify_html_text(content[last:], profile))

    result = "".join(parts)
    return result.strip() if profile == MinifyProfile.FULL else result


def minify(content: str, kind: FileKind, profile: MinifyProfile = MinifyProfile.FULL) -> str:
    """
    Minify content of the given kind.

    Args:
        content: File content
        kind: What the content is
        profile: How aggressively to minify

    Returns:
        Minified content, unchanged for kinds without a minifier

    Raises:
        MinifyError: If the content cannot be minified
    """
    if kind == FileKind.SCRIPT:
        return minify_script(content, profile)
    if kind == FileKind.HTML:
        return minify_html(content, profile)
    if kind == FileKind.CSS:
        return minify_css(content, profile)
    return content
