"""Constants for content paths, templates and output layout."""

# Source path of the site's own home page. Only this exact path renders to
# the site root; nested index files keep their own name.
ROOT_INDEX_SOURCE = "index.md"

# Content files with this extension are parsed, everything else is mirrored
MARKDOWN_EXTENSION = ".md"

# Template used when neither the page nor its parent listing names one
DEFAULT_TEMPLATE = "default.html"

# Built-in template for pagination redirect pages
REDIRECT_TEMPLATE = "_redirect"

# Template files are discovered by this extension
TEMPLATE_EXTENSION = ".html"

# Every rendered page is written as <path>/index.html
OUTPUT_FILENAME = "index.html"

# Path segment for paginated listing pages (<listing>/page/<n>/)
PAGE_SEGMENT = "page"


# Feed and sitemap file names in the output root
ATOM_FILENAME = "atom.xml"
SITEMAP_FILENAME = "sitemap.xml"

# Feed entries with more content than this use the summary instead
FEED_CONTENT_MAX_LENGTH = 500

# Summaries built from body text are cut to this many words
SUMMARY_MAX_WORDS = 30

# Directories never watched by the dev server
WATCH_IGNORE = [
    ".git",
    ".sass-cache",
    "node_modules",
]

# Dev server defaults
DEFAULT_SERVER_PORT = 8080
REBUILD_DEBOUNCE_SECONDS = 0.1
WATCH_POLL_INTERVAL_SECONDS = 0.5

# Pages built by the dev server poll this URL for the current build number
RELOAD_ENDPOINT = "/__folio/reload"
