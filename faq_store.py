"""FAQ entries, slugs and the in-memory store loaded at startup."""
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


def slugify(text):
    """Turns a question into a URL-friendly identifier."""
    slug = str(text).lower().strip()
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'[^\w\-]+', '', slug, flags=re.ASCII)
    slug = re.sub(r'\-\-+', '-', slug)
    return slug


@dataclass(frozen=True)
class FaqEntry:
    question: str
    answer: str

    @property
    def slug(self):
        return slugify(self.question)

    def matches(self, query):
        # query is expected to be normalized already
        return query in self.question.lower() or query in self.answer.lower()

    def to_dict(self):
        return {'question': self.question, 'answer': self.answer}


def normalize_query(query):
    return (query or '').lower().strip()


class FaqStore:
    def __init__(self, entries=()):
        self.entries = tuple(entries)

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def filter(self, query):
        q = normalize_query(query)
        if not q:
            return list(self.entries)
        return [entry for entry in self.entries if entry.matches(q)]

    @classmethod
    def from_records(cls, records):
        entries = []
        for item in records:
            if not isinstance(item, dict):
                continue
            question = (item.get('question') or '').strip()
            answer = (item.get('answer') or '').strip()
            if not question or not answer:
                logger.debug('Skipping incomplete FAQ record: %r', item)
                continue
            entries.append(FaqEntry(question=question, answer=answer))
        return cls(entries)

    @classmethod
    def load(cls, source):
        """Loads FAQs from a JSON file or an http(s) URL.

        Relative paths resolve against the application directory. Any failure
        is logged and produces an empty store so the server can still start.
        """
        try:
            if source.startswith('http://') or source.startswith('https://'):
                r = requests.get(source, timeout=5)
                r.raise_for_status()
                records = r.json()
            else:
                path = Path(source)
                if not path.is_absolute():
                    path = BASE_DIR / path
                with open(path, 'r', encoding='utf-8') as f:
                    records = json.load(f)
            if not isinstance(records, list):
                raise ValueError('expected a JSON array of FAQ objects')
        except (OSError, ValueError, requests.RequestException) as e:
            logger.warning('Failed to load FAQs from %s: %s', source, e)
            return cls()
        store = cls.from_records(records)
        logger.info('Loaded %d FAQs from %s', len(store), source)
        return store
