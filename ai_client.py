"""Client side of the AI fallback: the answer panel and the proxy client."""
import json
import logging
from collections import namedtuple

import requests

logger = logging.getLogger(__name__)

NO_ANSWER_MESSAGE = "I couldn't find an answer to that question."

# Panel states
HIDDEN = 'hidden'
LOADING = 'loading'
ANSWERED = 'answered'
NO_ANSWER = 'no-answer'
ERRORED = 'errored'

AiResponse = namedtuple('AiResponse', ['ok', 'status', 'reason', 'data'])


class AiProxyError(Exception):
    pass


class AiPanel:
    """The region of the page that shows the AI answer."""

    def __init__(self):
        self.hidden = True
        self.loading = False
        self.state = HIDDEN
        self.content = ''

    def hide(self):
        self.hidden = True
        self.state = HIDDEN

    def start_loading(self):
        self.hidden = False
        self.content = ''
        self.loading = True
        self.state = LOADING

    def show_answer(self, text):
        self.content = text
        self.state = ANSWERED

    def show_no_answer(self, feedback=None):
        message = NO_ANSWER_MESSAGE
        if feedback is not None:
            message += f" (Feedback: {json.dumps(feedback)})"
        self.content = message
        self.state = NO_ANSWER

    def show_error(self, reason):
        self.content = f"Sorry, something went wrong: {reason}"
        self.state = ERRORED


class HttpTransport:
    """Posts queries to a running proxy server."""

    def __init__(self, base_url='http://localhost:3000', timeout=60):
        self.url = base_url.rstrip('/') + '/api/ask-ai'
        self.timeout = timeout

    def __call__(self, query):
        resp = requests.post(self.url, json={'query': query}, timeout=self.timeout)
        # invalid JSON raises ValueError, handled like any other failure
        return AiResponse(resp.ok, resp.status_code, resp.reason, resp.json())


class LocalTransport:
    """Calls the proxy's answer function in-process.

    ``answer`` takes the query and returns a ``(payload, status)`` pair, the
    same shape the Flask route returns.
    """

    def __init__(self, answer):
        self.answer = answer

    def __call__(self, query):
        payload, status = self.answer(query)
        ok = 200 <= status < 300
        return AiResponse(ok, status, 'OK' if ok else 'Error', payload)


def extract_answer(data):
    """Returns candidates[0].content.parts[0].text, or None if it isn't there."""
    try:
        text = data['candidates'][0]['content']['parts'][0]['text']
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text


def error_reason(response):
    error = response.data.get('error') if isinstance(response.data, dict) else None
    if isinstance(error, dict) and error.get('message'):
        return error['message']
    if isinstance(error, str) and error:
        return error
    return f"API Error: {response.reason}"


class AiProxyClient:
    """Sends a query to the proxy and renders the outcome into an AiPanel.

    Only the most recent request may update the panel: if a new query is
    fetched before an earlier one completes, the earlier response is dropped.
    """

    def __init__(self, panel, transport):
        self.panel = panel
        self.transport = transport
        self.calls = []
        self._generation = 0

    def invalidate(self):
        """Drops any request still in flight and hides the panel."""
        self._generation += 1
        self.panel.loading = False
        self.panel.content = ''
        self.panel.hide()

    def fetch_ai_answer(self, query):
        self._generation += 1
        generation = self._generation
        self.calls.append(query)
        self.panel.start_loading()

        try:
            response = self.transport(query)
            logger.debug('Backend response: %s', response.data)
            if generation != self._generation:
                logger.info('Discarding stale AI response for %r', query)
                return

            if not response.ok:
                raise AiProxyError(error_reason(response))

            answer = extract_answer(response.data)
            if answer is not None:
                self.panel.show_answer(answer)
            else:
                logger.warning('No candidates returned: %s', response.data)
                feedback = None
                if isinstance(response.data, dict):
                    feedback = response.data.get('promptFeedback')
                self.panel.show_no_answer(feedback)
        except (AiProxyError, requests.RequestException, ValueError) as e:
            if generation != self._generation:
                return
            logger.error('Error fetching AI response: %s', e)
            self.panel.show_error(e)
        finally:
            if generation == self._generation:
                self.panel.loading = False
