# app.py - Part 1: Setup and Configuration
import os
import logging
from urllib.parse import quote
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

import requests
from flask import Flask, request, jsonify, render_template

from faq_store import FaqStore
from ai_client import LocalTransport
from widget import FaqWidget

logging.basicConfig(
    level=getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO),
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
)
logger = logging.getLogger(__name__)

# 1. Initialize App; static assets are served from the site root
app = Flask(__name__, static_folder='static', static_url_path='')

PORT = int(os.getenv('PORT', '3000'))
UPSTREAM_URL = os.getenv('UPSTREAM_URL', 'https://text.pollinations.ai/')
UPSTREAM_TIMEOUT = float(os.getenv('UPSTREAM_TIMEOUT', '30'))

PROMPT_PREFIX = "You are a helpful customer support assistant. Answer concisely: "
UPSTREAM_ERROR = 'Failed to get answer from AI'

# 2. FAQ store, loaded once (file or URL)
FAQS_SOURCE = os.getenv('FAQS_SOURCE', 'data/faqs.json')
FAQ_STORE = FaqStore.load(FAQS_SOURCE)


# app.py - Part 2: Upstream helpers
class UpstreamError(Exception):
    pass


def build_prompt(query):
    return PROMPT_PREFIX + query


def fetch_upstream_text(prompt):
    """Asks the text-generation service; the prompt travels in the URL path."""
    # same escaping as JavaScript's encodeURIComponent
    url = UPSTREAM_URL + quote(prompt, safe="-_.!~*'()")
    resp = requests.get(url, timeout=UPSTREAM_TIMEOUT)
    if not resp.ok:
        raise UpstreamError(f"Upstream API Error: {resp.status_code} {resp.reason}")
    return resp.text


def candidate_envelope(text):
    return {
        'candidates': [{
            'content': {'parts': [{'text': text}]}
        }]
    }


def answer_query(query):
    """Runs one proxy round trip. Returns (payload, status)."""
    if not query or not isinstance(query, str) or not query.strip():
        return {'error': 'Query is required'}, 400

    logger.info('Sending query to upstream: %s...', query[:50])
    try:
        text = fetch_upstream_text(build_prompt(query))
    except (UpstreamError, requests.RequestException) as e:
        logger.error('Error: %s', e)
        return {'error': UPSTREAM_ERROR}, 500

    return candidate_envelope(text), 200


# app.py - Part 3: Routes
@app.route('/api/ask-ai', methods=['POST'])
def ask_ai():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Query is required'}), 400
    payload, status = answer_query(data.get('query'))
    return jsonify(payload), status


@app.route('/', methods=['GET'])
def index():
    # fragments never reach the server, so only ?q= is restored here
    widget = FaqWidget(FAQ_STORE, LocalTransport(answer_query), url=request.full_path).boot()
    return render_template('index.html', widget=widget)


@app.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'faqs': len(FAQ_STORE)}), 200


# app.py - Part 4: Run Application

if __name__ == '__main__':
    logger.info('Server running at http://localhost:%d', PORT)
    app.run(host='0.0.0.0', port=PORT, debug=os.getenv('FLASK_DEBUG') == '1')
