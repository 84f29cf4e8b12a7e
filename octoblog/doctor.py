"""Lint a site's project structure and create missing framework directories.

The doctor never raises for problems it finds: every finding becomes one line
of the returned :class:`DoctorReport`, prefixed with ``✓`` (fine), ``✗``
(missing) or ``⚠`` (suspicious).
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ
from pathlib import Path

from octoblog._constants import LAYOUT_SUFFIXES, REQUIRED_STATIC_DIR
from octoblog.config.helpers import CONFIG_CANDIDATES
from octoblog.frontmatter import parse_front_matter
from octoblog.generator.content import POST_FILENAME_PATTERN

if typ.TYPE_CHECKING:
    from octoblog.config import SiteConfig

logger = logging.getLogger(__name__)

EXPECTED_LAYOUTS: tuple[str, ...] = (
    "default",
    "post",
    "index",
    "archive",
    "tag",
    "category",
)
STYLESHEET_NAMES: tuple[str, ...] = ("site.css", "site.scss")
CONFIG_KEYS: tuple[str, ...] = ("title", "description", "author", "url")
LAYOUT_MARKERS: tuple[tuple[str, str], ...] = (
    ("<!DOCTYPE", "缺少 DOCTYPE 声明"),
    ("<html", "缺少 <html> 标签"),
    ("<head>", "缺少 <head> 标签"),
    ("<body>", "缺少 <body> 标签"),
    ("{{", "没有找到模板变量"),
)


@dc.dataclass(slots=True)
class DoctorReport:
    """Findings of one doctor run.

    Attributes
    ----------
    lines : list[str]
        Human-readable report lines in check order.
    fixed : bool
        True when at least one missing directory was created.
    """

    lines: list[str] = dc.field(default_factory=list)
    fixed: bool = False

    def add(self, line: str) -> None:
        self.lines.append(line)

    @property
    def problems(self) -> list[str]:
        return [line for line in self.lines if line.lstrip().startswith(("✗", "⚠"))]


def _framework_dirs(config: SiteConfig) -> list[Path]:
    return [
        config.layouts_path,
        config.posts_path,
        config.data_path,
        config.includes_path,
        config.source / REQUIRED_STATIC_DIR,
    ]


def check_directories(config: SiteConfig, report: DoctorReport) -> None:
    report.add("=== 检查目录结构 ===")
    for path in _framework_dirs(config):
        name = path.relative_to(config.source).as_posix()
        if path.is_dir():
            report.add(f"✓ 目录存在: {name}")
            continue
        path.mkdir(parents=True, exist_ok=True)
        report.add(f"✓ 已创建目录: {name}")
        report.fixed = True


def _find_layout(root: Path, name: str) -> Path | None:
    for suffix in LAYOUT_SUFFIXES:
        candidate = root / f"{name}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def check_layouts(config: SiteConfig, report: DoctorReport) -> None:
    report.add("=== 检查布局文件 ===")
    found = 0
    for name in EXPECTED_LAYOUTS:
        path = _find_layout(config.layouts_path, name)
        if path is None:
            report.add(f"✗ 缺少布局文件: {name}")
            continue
        found += 1
        report.add(f"✓ 布局文件存在: {path.name}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            report.add(f"  ⚠ 无法读取布局: {exc}")
            continue
        for marker, warning in LAYOUT_MARKERS:
            if marker not in text:
                report.add(f"    ⚠ {warning}")
    if not found:
        report.add("⚠ 没有找到任何布局文件")


def _markup_files(root: Path, config: SiteConfig) -> typ.Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith(("_", ".")))
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if config.is_markup(path):
                yield path


def check_document(path: Path, report: DoctorReport, *, is_post: bool) -> None:
    """Report on the header fields and, for posts, the filename of ``path``."""
    kind = "文章" if is_post else "页面"
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        report.add(f"✗ {kind}文件无法读取 {path.name}: {exc}")
        return
    header, _body = parse_front_matter(text, source=path)
    if not header:
        report.add(f"⚠ {kind}文件缺少前置数据: {path.name}")
    else:
        report.add(f"✓ {kind}文件: {path.name}")
    title = header.get_str("title")
    report.add(f"    ✓ 标题: {title}" if title else "    ⚠ 缺少标题")
    layout = header.get_str("layout")
    report.add(f"    ✓ 布局: {layout}" if layout else "    ⚠ 缺少布局设置")
    if not is_post:
        return
    date = header.get_datetime("date")
    report.add(f"    ✓ 日期: {date:%Y-%m-%d}" if date else "    ⚠ 缺少日期")
    if not POST_FILENAME_PATTERN.match(path.name):
        report.add("    ⚠ 文件名格式不正确，应为: YYYY-MM-DD-title.md")


def check_documents(config: SiteConfig, report: DoctorReport) -> None:
    report.add("=== 检查 Markdown 文件 ===")
    for path in _markup_files(config.source, config):
        check_document(path, report, is_post=False)
    if not config.posts_path.is_dir():
        report.add(f"⚠ 文章目录不存在: {config.posts_path}")
        return
    for dirpath, dirnames, filenames in os.walk(config.posts_path):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if config.is_markup(path):
                check_document(path, report, is_post=True)


def check_stylesheets(config: SiteConfig, report: DoctorReport) -> None:
    report.add("=== 检查样式文件 ===")
    root = config.source / REQUIRED_STATIC_DIR
    if not root.is_dir():
        report.add(f"✗ 样式目录不存在: {root}")
        return
    found = [name for name in STYLESHEET_NAMES if (root / name).is_file()]
    for name in STYLESHEET_NAMES:
        report.add(f"✓ 样式文件存在: {name}" if name in found else f"✗ 缺少样式文件: {name}")
    if not found:
        report.add("⚠ 没有找到任何样式文件")


def check_config_file(config: SiteConfig, report: DoctorReport) -> None:
    report.add("=== 检查配置文件 ===")
    for name in CONFIG_CANDIDATES:
        path = config.source / name
        if not path.is_file():
            continue
        report.add(f"✓ 配置文件存在: {name}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            report.add(f"  ⚠ 无法读取配置文件: {exc}")
            return
        for key in CONFIG_KEYS:
            present = f"{key}:" in text or f"{key} =" in text
            report.add(f"    ✓ 配置项存在: {key}" if present else f"    ⚠ 缺少配置项: {key}")
        return
    report.add("⚠ 没有找到配置文件，将使用默认配置")


def run_doctor(config: SiteConfig) -> DoctorReport:
    """Run every project check against ``config.source``.

    Missing framework directories are created before the other checks run.

    Examples
    --------
    >>> report = run_doctor(config)  # doctest: +SKIP
    >>> report.lines[0]  # doctest: +SKIP
    '=== 检查目录结构 ==='
    """
    report = DoctorReport()
    check_directories(config, report)
    check_layouts(config, report)
    check_documents(config, report)
    check_stylesheets(config, report)
    check_config_file(config, report)
    logger.debug("doctor found %d problems", len(report.problems))
    return report


__all__ = ["DoctorReport", "check_document", "run_doctor"]
