"""Build the FAQ file the server loads at startup.

Usage:
    python scripts/build_faqs.py [url ...] [--urls-file FILE] [--out data/faqs.json]

Without arguments, URLs are read from scripts/faq_urls.txt (one per line,
``#`` starts a comment).
"""
import argparse
import json
import sys
import time
from pathlib import Path

import requests

from scrape_lib import dedupe, scrape_url

ROOT = Path(__file__).resolve().parent.parent
DEFAULT_URLS_FILE = ROOT / 'scripts' / 'faq_urls.txt'
DEFAULT_OUT = ROOT / 'data' / 'faqs.json'
RATE_DELAY = 2.0  # seconds between requests
MAX_FAQS = 1000


def read_urls(path):
    with open(path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip() and not line.strip().startswith('#')]


def collect(urls, delay=RATE_DELAY, scrape=scrape_url):
    entries = []
    seen = set()
    for i, url in enumerate(urls, start=1):
        print(f"[{i}/{len(urls)}] Scraping {url}")
        try:
            items = dedupe(scrape(url), seen)
        except requests.RequestException as e:
            print(f"  Failed to scrape {url}: {e}")
        else:
            print(f"  -> {len(items)} new items")
            entries.extend(items)
        if delay and i < len(urls):
            time.sleep(delay)
    return entries[:MAX_FAQS]


def write_faqs(entries, out_path):
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if out_path.exists():
        bak = out_path.with_suffix('.json.bak')
        out_path.replace(bak)
        print(f"Backed up existing {out_path} to {bak}")
    with open(out_path, 'w', encoding='utf-8') as f:
        json.dump([e.to_dict() for e in entries], f, indent=2, ensure_ascii=False)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('urls', nargs='*')
    parser.add_argument('--urls-file', type=Path, default=None)
    parser.add_argument('--out', type=Path, default=DEFAULT_OUT)
    args = parser.parse_args(argv)

    urls = list(args.urls)
    urls_file = args.urls_file or (None if urls else DEFAULT_URLS_FILE)
    if urls_file is not None:
        if not urls_file.exists():
            print(f"URLs file not found: {urls_file}")
            return 1
        urls.extend(read_urls(urls_file))

    entries = collect(urls)
    if not entries:
        print("No FAQs found; leaving existing file untouched")
        return 1

    write_faqs(entries, args.out)
    print(f"Wrote {len(entries)} FAQs to {args.out}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
