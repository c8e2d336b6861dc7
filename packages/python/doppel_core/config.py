CHAT_COMPLETION_MODEL = "gpt-4o"  # personality insight + descriptor
DIALOGUE_MODEL = "gpt-4o"  # streaming role-play replies

LETTERBOXD_HOST = "letterboxd.com"
LETTERBOXD_RSS_TEMPLATE = "https://letterboxd.com/{username}/rss/"

# Letterboxd rejects non-browser clients
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)
RSS_ACCEPT_HEADER = "application/rss+xml, application/xml, text/xml, */*"
FEED_TIMEOUT_S = 10.0

MAX_FEED_ITEMS = 20
MAX_RECENT_RATINGS = 10
MAX_FAVORITE_GENRES = 5
MAX_FAVORITE_FILMS = 5
FAVORITE_RATING_THRESHOLD = 4.5
MAX_PROMPT_TRACKS = 5
