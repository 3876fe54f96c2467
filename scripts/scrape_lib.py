"""Helpers for pulling question/answer pairs out of FAQ pages.

Extraction is heuristic; it looks for the layouts FAQ pages commonly use.
Only scrape sites you have permission to scrape.
"""
import requests
from bs4 import BeautifulSoup, FeatureNotFound

from faq_store import FaqEntry, slugify

DEFAULT_HEADERS = {
    'User-Agent': 'faq-widget-seeder/1.0'
}


def fetch_soup(url, timeout=10):
    resp = requests.get(url, timeout=timeout, headers=DEFAULT_HEADERS)
    resp.raise_for_status()
    return parse_html(resp.text)


def parse_html(html):
    try:
        return BeautifulSoup(html, 'lxml')
    except FeatureNotFound:
        return BeautifulSoup(html, 'html.parser')


def _text(el):
    return el.get_text(separator=' ', strip=True)


def _definition_lists(soup):
    for dl in soup.find_all('dl'):
        for dt, dd in zip(dl.find_all('dt'), dl.find_all('dd')):
            yield _text(dt), _text(dd)


def _headings(soup):
    # a heading followed by everything up to the next heading
    for h in soup.find_all(['h2', 'h3', 'h4']):
        body = []
        for sib in h.next_siblings:
            name = getattr(sib, 'name', None)
            if name and name.startswith('h'):
                break
            if name:
                text = _text(sib)
                if text:
                    body.append(text)
        yield _text(h), '\n'.join(body)


def _classed(soup):
    for qel in soup.select('.faq-question, .faq, .question'):
        ans = qel.find_next_sibling(class_='answer') or qel.find_next(class_='answer')
        if ans is not None:
            yield _text(qel), _text(ans)


def _list_items(soup):
    for li in soup.find_all('li'):
        question, sep, rest = _text(li).partition('?')
        if sep and rest.strip():
            yield question.strip() + '?', rest.strip()


STRATEGIES = (_definition_lists, _headings, _classed, _list_items)


def dedupe(entries, seen=None):
    """Drops entries whose question slug was already seen, keeping order."""
    seen = set() if seen is None else seen
    unique = []
    for entry in entries:
        slug = slugify(entry.question)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        unique.append(entry)
    return unique


def extract_faqs(soup):
    found = []
    for strategy in STRATEGIES:
        for question, answer in strategy(soup):
            question, answer = question.strip(), answer.strip()
            if question and answer:
                found.append(FaqEntry(question=question, answer=answer))
    return dedupe(found)


def scrape_url(url, timeout=10):
    return extract_faqs(fetch_soup(url, timeout=timeout))
