"""Report formatting slips in markup documents without rejecting them.

The validator powers build-time warnings, the doctor's content checks and the
``--test-markdown`` self-test. Findings are informational: the converter in
:mod:`octoblog.generator.renderer` repairs the same slips during rendering.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from .frontmatter import parse_front_matter, split_front_matter
from .generator.renderer import MarkdownConverter

FENCE_PATTERN = re.compile(r"^\s*(`{3,}|~{3,})")
HEADING_PATTERN = re.compile(r"^#{1,6}(?=[^#\s])")
BULLET_PATTERN = re.compile(r"^([-+*])(?=[^\s\-+*])")


@dc.dataclass(frozen=True, slots=True)
class MarkdownIssue:
    """A single validator finding; ``line`` is 1-based, or ``None`` for the document."""

    message: str
    line: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}: {self.message}"


def validate_markdown(text: str) -> list[MarkdownIssue]:
    """Return formatting findings for a full document.

    A leading front-matter block is skipped; line numbers still refer to the
    original document.

    Examples
    --------
    >>> [str(issue) for issue in validate_markdown("#Title\\n")]
    ['line 1: missing space after heading marker']
    """
    if not text.strip():
        return [MarkdownIssue("document is empty")]
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    offset = 0
    body = normalized
    parts = split_front_matter(normalized)
    if parts is not None:
        header, body = parts
        offset = header.count("\n") + 3 if header else 2
    if not body.strip():
        return [MarkdownIssue("document body is empty")]

    issues: list[MarkdownIssue] = []
    open_fence: tuple[str, int] | None = None
    for index, line in enumerate(body.split("\n"), start=offset + 1):
        fence = FENCE_PATTERN.match(line)
        if fence:
            marker = fence.group(1)
            if open_fence is None:
                open_fence = (marker, index)
            elif marker[0] == open_fence[0][0] and len(marker) >= len(open_fence[0]):
                open_fence = None
            continue
        if open_fence is not None:
            continue
        if HEADING_PATTERN.match(line):
            issues.append(MarkdownIssue("missing space after heading marker", index))
        bullet = BULLET_PATTERN.match(line)
        if bullet and not (bullet.group(1) == "*" and line.count("*") > 1):
            issues.append(MarkdownIssue("missing space after list bullet", index))
    if open_fence is not None:
        issues.append(MarkdownIssue("code fence is never closed", open_fence[1]))
    return issues


@dc.dataclass(frozen=True, slots=True)
class SelfTestCase:
    """Canned document with the validator verdict it should produce."""

    name: str
    content: str
    expect_valid: bool


@dc.dataclass(frozen=True, slots=True)
class SelfTestResult:
    """Outcome of running one self-test case."""

    case: SelfTestCase
    issues: tuple[MarkdownIssue, ...]
    html_length: int

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def passed(self) -> bool:
        return self.valid == self.case.expect_valid


SELF_TEST_CASES: tuple[SelfTestCase, ...] = (
    SelfTestCase(
        "well-formed document",
        '---\ntitle: "测试文章"\ndate: 2024-01-01\nlayout: post\n---\n\n'
        "# 标题1\n\n这是一段正常的内容。\n\n## 标题2\n\n- 列表项1\n- 列表项2\n\n"
        '```python\nprint("Hello, World!")\n```\n',
        expect_valid=True,
    ),
    SelfTestCase(
        "missing front matter",
        "# 标题\n\n这是没有前置数据的内容。\n\n- 列表项\n",
        expect_valid=True,
    ),
    SelfTestCase(
        "headings without spaces",
        '---\ntitle: "测试"\n---\n\n#标题1\n##标题2\n\n正常内容\n',
        expect_valid=False,
    ),
    SelfTestCase(
        "bullets without spaces",
        '---\ntitle: "测试"\n---\n\n-列表项1\n*列表项2\n+列表项3\n',
        expect_valid=False,
    ),
    SelfTestCase(
        "unclosed code fence",
        '---\ntitle: "测试"\n---\n\n```python\nprint("Hello")\n# missing fence\n',
        expect_valid=False,
    ),
    SelfTestCase("empty document", "", expect_valid=False),
    SelfTestCase("whitespace only", "   \n\t\n  ", expect_valid=False),
    SelfTestCase(
        "malformed YAML header",
        '---\ntitle: "测试"\ndate: 2024-01-01\nlayout: post\ninvalid: yaml: format\n'
        "---\n\n正常内容\n",
        expect_valid=True,
    ),
)


def run_markdown_self_test(
    converter: MarkdownConverter | None = None,
    cases: typ.Iterable[SelfTestCase] = SELF_TEST_CASES,
) -> list[SelfTestResult]:
    """Validate and convert every canned case, collecting the outcomes."""
    active = converter or MarkdownConverter()
    results: list[SelfTestResult] = []
    for case in cases:
        issues = tuple(validate_markdown(case.content))
        _header, body = parse_front_matter(case.content, source=case.name)
        results.append(
            SelfTestResult(case=case, issues=issues, html_length=len(active.convert(body)))
        )
    return results


__all__ = [
    "SELF_TEST_CASES",
    "MarkdownIssue",
    "SelfTestCase",
    "SelfTestResult",
    "run_markdown_self_test",
    "validate_markdown",
]
