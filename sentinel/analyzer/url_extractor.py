import re

URL_REGEX = re.compile(r'https?://[^\s<>]+', re.IGNORECASE)


def extract_urls(text: str) -> list[str]:
    """Returns every http(s) URL in the text, duplicates removed, first-seen order kept."""
    if not text:
        return []
    return list(dict.fromkeys(URL_REGEX.findall(text)))


def defang_url(url: str) -> str:
    # Only the scheme separator, e.g. http://a.com:8080 -> http[:]//a.com:8080
    return url.replace(":", "[:]", 1)
