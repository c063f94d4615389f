"""
Code block recovery helpers.

Handles:
- Best-effort language detection from class names, attributes and file-name
  comments on the first line of a snippet
- Inline sentinel encoding so message content stays a single string:
  CODE_BLOCK_START:<language>:<url-encoded code>:CODE_BLOCK_END
- Decoding that format back into text/code segments for consumers

Detection rules are kept as ordered tables so they can be tested and
extended without touching the matching code.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable
from urllib.parse import quote, unquote


class Language(str, Enum):
    """Languages recognized in recovered code blocks."""
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JAVA = "java"
    CPP = "cpp"
    C = "c"
    CSHARP = "csharp"
    GO = "go"
    RUST = "rust"
    RUBY = "ruby"
    PHP = "php"
    SWIFT = "swift"
    KOTLIN = "kotlin"
    SCALA = "scala"
    R = "r"
    MATLAB = "matlab"
    BASH = "bash"
    SQL = "sql"
    HTML = "html"
    CSS = "css"
    XML = "xml"
    JSON = "json"
    YAML = "yaml"
    MARKDOWN = "markdown"
    OTHER = "other"  # explicitly tagged, but not a language we track
    UNKNOWN = "unknown"


# Explicit names (class suffixes, data-language values, header labels)
LANGUAGE_ALIASES: dict[str, Language] = {
    "py": Language.PYTHON,
    "python3": Language.PYTHON,
    "js": Language.JAVASCRIPT,
    "jsx": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,
    "ts": Language.TYPESCRIPT,
    "tsx": Language.TYPESCRIPT,
    "c++": Language.CPP,
    "cxx": Language.CPP,
    "cs": Language.CSHARP,
    "c#": Language.CSHARP,
    "golang": Language.GO,
    "rs": Language.RUST,
    "rb": Language.RUBY,
    "kt": Language.KOTLIN,
    "sh": Language.BASH,
    "shell": Language.BASH,
    "zsh": Language.BASH,
    "console": Language.BASH,
    "htm": Language.HTML,
    "yml": Language.YAML,
    "md": Language.MARKDOWN,
}

# File extension -> language; an extension must match exactly, so ".json"
# never counts as ".js" and ".jsx" never as ".js"
EXTENSION_RULES: list[tuple[frozenset[str], Language]] = [
    (frozenset({"py", "pyw"}), Language.PYTHON),
    (frozenset({"js", "mjs", "cjs", "jsx"}), Language.JAVASCRIPT),
    (frozenset({"ts", "tsx"}), Language.TYPESCRIPT),
    (frozenset({"java"}), Language.JAVA),
    (frozenset({"cpp", "cc", "cxx", "hpp", "c++"}), Language.CPP),
    (frozenset({"c", "h"}), Language.C),
    (frozenset({"cs"}), Language.CSHARP),
    (frozenset({"go"}), Language.GO),
    (frozenset({"rs"}), Language.RUST),
    (frozenset({"rb"}), Language.RUBY),
    (frozenset({"php"}), Language.PHP),
    (frozenset({"swift"}), Language.SWIFT),
    (frozenset({"kt", "kts"}), Language.KOTLIN),
    (frozenset({"scala"}), Language.SCALA),
    (frozenset({"r"}), Language.R),
    (frozenset({"m"}), Language.MATLAB),
    (frozenset({"sh", "bash"}), Language.BASH),
    (frozenset({"sql"}), Language.SQL),
    (frozenset({"html", "htm"}), Language.HTML),
    (frozenset({"css", "scss"}), Language.CSS),
    (frozenset({"xml"}), Language.XML),
    (frozenset({"json"}), Language.JSON),
    (frozenset({"yaml", "yml"}), Language.YAML),
    (frozenset({"md"}), Language.MARKDOWN),
]

# Syntax-highlighter token classes; all classes in a set must be present
HIGHLIGHTER_RULES: list[tuple[frozenset[str], Language]] = [
    (frozenset({"hljs-keyword", "hljs-built_in"}), Language.PYTHON),
]

# language-python, lang-js, highlight-ruby
LANGUAGE_CLASS_PATTERN = re.compile(r"^(?:language-|lang-|highlight-)([\w+#.-]+)$", re.I)

COMMENT_PREFIXES = ("#", "//", "/*", "<!--", "--", ";", "%", "*")

_TOKEN_STRIP = "'\"`()[]{}<>:,;*"

CODE_BLOCK_START = "CODE_BLOCK_START"
CODE_BLOCK_END = "CODE_BLOCK_END"

# Characters encodeURIComponent leaves untouched
_URI_SAFE = "-_.!~*'()"

SENTINEL_PATTERN = re.compile(
    rf"{CODE_BLOCK_START}:([^:\s]*):([^:\s]*):{CODE_BLOCK_END}"
)


def language_from_name(name: str | None) -> Language:
    """Resolve an explicit language label; unrecognized labels are OTHER."""
    if not name or not name.strip():
        return Language.UNKNOWN
    key = name.strip().lower()
    if key in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[key]
    try:
        return Language(key)
    except ValueError:
        return Language.OTHER


def language_from_classes(class_names: Iterable[str]) -> Language:
    """Find an explicit language-* / lang-* / highlight-* class."""
    for cls in class_names:
        if match := LANGUAGE_CLASS_PATTERN.match(cls):
            return language_from_name(match.group(1))
    return Language.UNKNOWN


def language_from_first_line(first_line: str) -> Language:
    """Match a file name mentioned in a leading comment, e.g. '# app/main.py'."""
    line = first_line.strip()
    if not line.startswith(COMMENT_PREFIXES):
        return Language.UNKNOWN

    for token in line.split():
        token = token.strip(_TOKEN_STRIP)
        if "." not in token:
            continue
        extension = token.rsplit(".", 1)[1].lower()
        for extensions, language in EXTENSION_RULES:
            if extension in extensions:
                return language
    return Language.UNKNOWN


def language_from_highlighter(highlight_classes: Iterable[str]) -> Language:
    """Last-resort guess from highlighter token classes inside a block."""
    present = set(highlight_classes)
    for required, language in HIGHLIGHTER_RULES:
        if required <= present:
            return language
    return Language.UNKNOWN


def detect_language(
    first_line: str,
    class_names: Iterable[str] = (),
    data_language: str | None = None,
    highlight_classes: Iterable[str] = (),
) -> Language:
    """
    Detect the language of a code snippet.

    Checks, in order: explicit data-language attribute, explicit language
    class, a file-name comment on the first line, then highlighter classes.

    Args:
        first_line: First line of the code text
        class_names: Classes on the code element
        data_language: Value of a data-language attribute, if any
        highlight_classes: Classes of highlighter tokens nested in the block

    Returns:
        Detected Language, UNKNOWN when nothing matched
    """
    detectors = (
        lambda: language_from_name(data_language) if data_language else Language.UNKNOWN,
        lambda: language_from_classes(class_names),
        lambda: language_from_first_line(first_line),
        lambda: language_from_highlighter(highlight_classes),
    )
    for detector in detectors:
        language = detector()
        if language is not Language.UNKNOWN:
            return language
    return Language.UNKNOWN


@dataclass(frozen=True)
class CodeBlock:
    """A code snippet recovered from a message."""
    language: str
    content: str

    def to_sentinel(self) -> str:
        return encode_code_block(self.language, self.content)


@dataclass(frozen=True)
class TextSegment:
    text: str


@dataclass(frozen=True)
class CodeSegment:
    code: str
    language: str


def _sentinel_language(language: str) -> str:
    label = re.sub(r"[:\s]+", "-", (language or "").strip())
    return label or Language.UNKNOWN.value


def encode_code_block(language: str, content: str) -> str:
    """Encode a code block as an inline sentinel on its own line."""
    encoded = quote(content, safe=_URI_SAFE)
    return f"\n{CODE_BLOCK_START}:{_sentinel_language(language)}:{encoded}:{CODE_BLOCK_END}\n"


def decode_segments(content: str) -> list[TextSegment | CodeSegment]:
    """Split sentinel-encoded content into ordered text and code segments."""
    segments: list[TextSegment | CodeSegment] = []
    position = 0
    for match in SENTINEL_PATTERN.finditer(content):
        text = content[position:match.start()]
        if text.strip():
            segments.append(TextSegment(text=text.strip()))
        segments.append(CodeSegment(code=unquote(match.group(2)), language=match.group(1)))
        position = match.end()

    tail = content[position:]
    if tail.strip():
        segments.append(TextSegment(text=tail.strip()))
    return segments


def extract_code_blocks(content: str) -> list[CodeBlock]:
    """List the code blocks embedded in sentinel-encoded content."""
    return [
        CodeBlock(language=segment.language, content=segment.code)
        for segment in decode_segments(content)
        if isinstance(segment, CodeSegment)
    ]


def strip_code_blocks(content: str) -> str:
    """Replace sentinels with plain fenced code, for prompt building."""
    parts = []
    for segment in decode_segments(content):
        if isinstance(segment, CodeSegment):
            parts.append(f"```{segment.language}\n{segment.code}\n```")
        else:
            parts.append(segment.text)
    return "\n\n".join(parts)
