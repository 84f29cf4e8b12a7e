"""Tests for the project doctor."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from octoblog.config import load_site_config
from octoblog.doctor import run_doctor


def test_missing_directories_are_created(site_root: Path) -> None:
    report = run_doctor(load_site_config(source=site_root))

    assert report.fixed is True
    assert (site_root / "_data").is_dir()
    assert "✓ 已创建目录: _data" in report.lines
    assert "✓ 目录存在: _posts" in report.lines


def test_second_run_has_nothing_to_fix(site_root: Path) -> None:
    config = load_site_config(source=site_root)
    run_doctor(config)

    assert run_doctor(config).fixed is False


def test_layout_findings(site_root: Path) -> None:
    lines = run_doctor(load_site_config(source=site_root)).lines

    assert "✓ 布局文件存在: default.html" in lines
    assert "✗ 缺少布局文件: tag" in lines
    assert "✗ 缺少布局文件: category" in lines


def test_layout_content_markers(
    site_root: Path, write_file: typ.Callable[[str, str], Path]
) -> None:
    write_file("_layouts/tag.html", "<p>no template here</p>")

    lines = run_doctor(load_site_config(source=site_root)).lines
    start = lines.index("✓ 布局文件存在: tag.html")
    warnings = lines[start + 1 : start + 6]

    assert warnings == [
        "    ⚠ 缺少 DOCTYPE 声明",
        "    ⚠ 缺少 <html> 标签",
        "    ⚠ 缺少 <head> 标签",
        "    ⚠ 缺少 <body> 标签",
        "    ⚠ 没有找到模板变量",
    ]


def test_document_findings(
    site_root: Path, write_file: typ.Callable[[str, str], Path]
) -> None:
    write_file("_posts/misnamed.md", "---\ntitle: Misnamed\n---\nBody\n")

    lines = run_doctor(load_site_config(source=site_root)).lines

    assert "✓ 页面文件: about.md" in lines
    assert "    ⚠ 缺少布局设置" in lines
    start = lines.index("✓ 文章文件: misnamed.md")
    assert lines[start + 1 : start + 5] == [
        "    ✓ 标题: Misnamed",
        "    ⚠ 缺少布局设置",
        "    ⚠ 缺少日期",
        "    ⚠ 文件名格式不正确，应为: YYYY-MM-DD-title.md",
    ]


def test_stylesheet_and_config_findings(site_root: Path) -> None:
    lines = run_doctor(load_site_config(source=site_root)).lines

    assert "✓ 样式文件存在: site.css" in lines
    assert "✗ 缺少样式文件: site.scss" in lines
    assert "✓ 配置文件存在: _config.yml" in lines
    assert "    ✓ 配置项存在: url" in lines


def test_without_config_file(tmp_path: Path) -> None:
    report = run_doctor(load_site_config(source=tmp_path))

    assert "⚠ 没有找到配置文件，将使用默认配置" in report.lines
    assert "⚠ 没有找到任何布局文件" in report.lines
    assert "⚠ 没有找到任何样式文件" in report.lines
    assert report.problems
