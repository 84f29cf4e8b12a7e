"""Common literal values used across octoblog.

These constants keep directory names, output locations and user-facing labels
centralized so the builder, the preview server, the doctor and tests can import
the same values without drifting.

Examples
--------
>>> from octoblog import _constants
>>> _constants.PAGINATION_PATH_TEMPLATE.format(number=2)
'page/2/index.html'
>>> "stylesheets" in _constants.STATIC_DIRS
True
"""

STATIC_DIRS: tuple[str, ...] = ("stylesheets", "images", "js", "fonts", "assets")
REQUIRED_STATIC_DIR = "stylesheets"
LAYOUT_SUFFIXES: tuple[str, ...] = (".html", ".htm")
DATA_SUFFIXES: tuple[str, ...] = (".yml", ".yaml")

HOME_INDEX_PATH = "index.html"
PAGINATION_PATH_TEMPLATE = "page/{number}/index.html"
ARCHIVES_DIR = "archives"
ARCHIVE_INDEX_PATH = f"{ARCHIVES_DIR}/{HOME_INDEX_PATH}"
TAGS_INDEX_PATH = "tags/index.html"
CATEGORIES_INDEX_PATH = "categories/index.html"
FEED_PATH = "feed.xml"
SITEMAP_PATH = "sitemap.xml"

FEED_SIZE = 20
TAG_CLOUD_SIZE = 20
EMPTY_TAG = "无标签"
ARCHIVE_TITLE = "归档"
TAGS_TITLE = "标签"
CATEGORIES_TITLE = "分类"
NOT_FOUND_BODY = "404 - 页面未找到"
EMPTY_QUERY_MESSAGE = "查询参数不能为空"

VERSION = "0.1.0"
