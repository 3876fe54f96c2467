"""Interaction model of the FAQ page.

Everything the page does in response to the user lives here: filtering,
the single-select accordion, keeping ``?q=`` and ``#slug`` in the URL in step
with the page, and the debounced live filter. Browser pieces are modelled
explicitly so the same logic can run server-side and under test.
"""
import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ai_client import AiPanel, AiProxyClient
from faq_store import normalize_query, slugify

logger = logging.getLogger(__name__)

DEBOUNCE_DELAY = 0.3


class Location:
    """URL store with push/replace history semantics."""

    def __init__(self, url='/'):
        self.entries = [url]
        self.index = 0

    @property
    def url(self):
        return self.entries[self.index]

    @property
    def fragment(self):
        return urlsplit(self.url).fragment

    def get_param(self, name):
        # first value wins, like URLSearchParams.get
        for key, value in parse_qsl(urlsplit(self.url).query, keep_blank_values=True):
            if key == name:
                return value
        return None

    def push(self, url):
        # pushing drops any forward entries, like a browser does
        del self.entries[self.index + 1:]
        self.entries.append(url)
        self.index += 1

    def replace(self, url):
        self.entries[self.index] = url

    def back(self):
        if self.index > 0:
            self.index -= 1
        return self.url

    def forward(self):
        if self.index < len(self.entries) - 1:
            self.index += 1
        return self.url

    def with_param(self, name, value):
        """Current URL with ``name`` set, or removed when value is empty."""
        parts = urlsplit(self.url)
        params = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
        if value:
            params.append((name, value))
        return urlunsplit(parts._replace(query=urlencode(params)))

    def with_fragment(self, fragment):
        return urlunsplit(urlsplit(self.url)._replace(fragment=fragment or ''))


@dataclass
class RenderedItem:
    slug: str
    question: str
    answer: str
    expanded: bool = False


class FaqView:
    """Rendered FAQ list plus the accordion state keyed by slug."""

    def __init__(self, location):
        self.location = location
        self.items = []
        self.expanded = None

    def render(self, entries):
        if self.expanded is not None:
            self.location.replace(self.location.with_fragment(''))
        self.expanded = None

        items = []
        seen = {}
        for entry in entries:
            slug = slugify(entry.question)
            count = seen.get(slug, 0) + 1
            seen[slug] = count
            if count > 1:
                slug = f'{slug}-{count}'
            items.append(RenderedItem(slug, entry.question, entry.answer))
        self.items = items

    def get(self, slug):
        for item in self.items:
            if item.slug == slug:
                return item
        return None

    @property
    def slugs(self):
        return [item.slug for item in self.items]

    def toggle(self, slug):
        """Expands ``slug`` and collapses every other item, or collapses it
        if it was the expanded one. Returns True when the item ends expanded.
        """
        target = self.get(slug)
        if target is None:
            raise KeyError(slug)

        was_expanded = target.expanded
        for item in self.items:
            item.expanded = False

        if was_expanded:
            self.expanded = None
            self.location.replace(self.location.with_fragment(''))
            return False

        target.expanded = True
        self.expanded = slug
        self.location.replace(self.location.with_fragment(slug))
        return True


class Debouncer:
    """Runs ``callback`` once input has been quiet for ``delay`` seconds.

    Every call cancels the pending timer and schedules a new one, so only the
    last call inside a window fires, with that call's arguments.
    """

    def __init__(self, callback, delay=DEBOUNCE_DELAY, loop=None):
        self.callback = callback
        self.delay = delay
        self.loop = loop
        self._handle = None

    @property
    def pending(self):
        return self._handle is not None

    def __call__(self, *args):
        self.cancel()
        loop = self.loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args)

    def cancel(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args):
        self._handle = None
        self.callback(*args)


class SearchController:
    def __init__(self, store, view, location, ai_client, delay=DEBOUNCE_DELAY, loop=None):
        self.store = store
        self.view = view
        self.location = location
        self.ai_client = ai_client
        self.input_value = ''
        self.filter_runs = 0
        self._live = Debouncer(self._live_filter, delay=delay, loop=loop)

    def _show(self, query):
        self.filter_runs += 1
        if not query:
            self.view.render(self.store.entries)
            self.ai_client.invalidate()
            return False
        self.view.render(self.store.filter(query))
        return True

    def search(self, query, persist_history=True):
        q = normalize_query(query)

        if persist_history:
            self.location.push(self.location.with_param('q', q))

        if not self._show(q):
            return

        # the AI is asked even when the local filter found matches
        self.ai_client.fetch_ai_answer(query.strip())

    def submit(self):
        """Explicit search from the button or the Enter key."""
        self._live.cancel()
        self.search(self.input_value, persist_history=True)

    def on_input(self, value):
        self.input_value = value
        self._live(value)

    def _live_filter(self, value):
        q = normalize_query(value)
        self.location.replace(self.location.with_param('q', q))
        self._show(q)

    def boot(self):
        """Initial page load: restore the search from ``?q=`` and the
        expanded item from ``#slug``."""
        self.view.render(self.store.entries)

        initial = self.location.get_param('q')
        if initial:
            self.input_value = initial
            self.search(initial, persist_history=False)

        fragment = self.location.fragment
        if fragment and self.view.get(fragment) is not None:
            self.view.toggle(fragment)


class FaqWidget:
    """Wires the store, view, panel and controllers together for one page."""

    def __init__(self, store, transport, url='/', delay=DEBOUNCE_DELAY, loop=None):
        self.store = store
        self.location = Location(url)
        self.view = FaqView(self.location)
        self.panel = AiPanel()
        self.ai_client = AiProxyClient(self.panel, transport)
        self.search = SearchController(
            store, self.view, self.location, self.ai_client,
            delay=delay, loop=loop,
        )

    def boot(self):
        self.search.boot()
        return self

    def toggle(self, slug):
        return self.view.toggle(slug)

    @property
    def query(self):
        return self.search.input_value
