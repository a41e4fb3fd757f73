"""Constants for the upstream APIs."""

# Hacker News (Firebase)
HN_API_BASE_URL = "https://hacker-news.firebaseio.com/v0"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
HN_LIST_ENDPOINTS: dict[str, str] = {
    "top": "topstories",
    "new": "newstories",
    "best": "beststories",
    "ask": "askstories",
    "show": "showstories",
    "job": "jobstories",
}
HN_DEFAULT_LIST = "top"
HN_DETAIL_CONCURRENCY = 8
HN_DETAIL_TIMEOUT_SECONDS = 8.0

# V2EX
V2EX_V1_BASE_URL = "https://www.v2ex.com/api"
V2EX_V2_BASE_URL = "https://www.v2ex.com/api/v2"
V2EX_TOPIC_URL = "https://www.v2ex.com/t/{id}"
V2EX_NODE_URL = "https://www.v2ex.com/go/{node}"
V2EX_V1_FEEDS: dict[str, str] = {
    "hot": "/topics/hot.json",
    "latest": "/topics/latest.json",
}
V2EX_FALLBACK_FEED = "hot"
V2EX_PAGE_CONCURRENCY = 3
V2EX_TIMEOUT_SECONDS = 15.0
V2EX_MAX_QPS = 2.0

# Enrichment
SUPPLEMENT_HEADER = "\n\n--- 附言 {n} ---\n"
ENRICH_DEFAULT_MAX_LENGTH = 8000

PLATFORM_V2EX = "v2ex"
