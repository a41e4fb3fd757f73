"""HTML to plain text."""

from bs4 import BeautifulSoup


def strip_html(html: str) -> str:
    """Convert an HTML fragment to plain text.

    Tags are removed, entities unescaped, and paragraph and line breaks
    become newlines.

    Args:
        html: HTML fragment (may be plain text).

    Returns:
        Stripped text.
    """
    if not html or not html.strip():
        return ""
    if "<" not in html and "&" not in html:
        return html.strip()

    soup = BeautifulSoup(html, "lxml")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for paragraph in soup.find_all("p"):
        paragraph.insert_before("\n")
    return soup.get_text().strip()
