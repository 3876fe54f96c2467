import json

import pytest

from faq_store import FaqEntry, FaqStore, slugify


STORE = FaqStore([
    FaqEntry('How do I reset my password?', 'Use the Forgot Password link.'),
    FaqEntry('What payment methods do you accept?', 'Visa, MasterCard and PayPal.'),
    FaqEntry('Can I cancel my subscription?', 'Yes, from your account settings.'),
])


def test_slugify_example():
    assert slugify('How do I reset my password?') == 'how-do-i-reset-my-password'


@pytest.mark.parametrize('text', [
    'How do I reset my password?',
    '  Is there a  free -- trial? ',
    'What about émojis & symbols?!',
    '? leading punctuation',
    'snake_case stays',
])
def test_slugify_is_idempotent(text):
    once = slugify(text)
    assert slugify(once) == once
    assert slugify(text) == once


def test_slugify_collapses_hyphens_and_drops_symbols():
    assert slugify('A  -  B & C') == 'a-b-c'


def test_filter_matches_question_or_answer_case_insensitively():
    assert [e.question for e in STORE.filter('PASSWORD')] == ['How do I reset my password?']
    assert [e.question for e in STORE.filter('paypal')] == ['What payment methods do you accept?']


def test_filter_trims_query():
    assert len(STORE.filter('  cancel ')) == 1


def test_filter_empty_query_returns_everything_in_order():
    assert STORE.filter('') == list(STORE.entries)
    assert STORE.filter('   ') == list(STORE.entries)


def test_filter_no_match():
    assert STORE.filter('refund') == []


def test_entries_are_immutable():
    entry = STORE.entries[0]
    with pytest.raises(AttributeError):
        entry.question = 'changed'


def test_load_from_file_skips_incomplete_records(tmp_path):
    path = tmp_path / 'faqs.json'
    path.write_text(json.dumps([
        {'question': 'Q1?', 'answer': 'A1'},
        {'question': 'Q2?'},
        {'question': '  ', 'answer': 'A3'},
        'not an object',
    ]), encoding='utf-8')

    store = FaqStore.load(str(path))
    assert [e.to_dict() for e in store] == [{'question': 'Q1?', 'answer': 'A1'}]


def test_load_missing_file_gives_empty_store(tmp_path):
    store = FaqStore.load(str(tmp_path / 'missing.json'))
    assert len(store) == 0


def test_load_rejects_non_list_json(tmp_path):
    path = tmp_path / 'faqs.json'
    path.write_text('{"question": "Q?"}', encoding='utf-8')
    assert len(FaqStore.load(str(path))) == 0


def test_load_relative_path_uses_app_directory():
    store = FaqStore.load('data/faqs.json')
    assert len(store) == 5
    assert store.entries[0].slug == 'how-do-i-reset-my-password'


def test_load_from_url(monkeypatch):
    class FakeResponse:
        def raise_for_status(self):
            pass

        def json(self):
            return [{'question': 'Remote?', 'answer': 'Yes'}]

    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        return FakeResponse()

    monkeypatch.setattr('faq_store.requests.get', fake_get)
    store = FaqStore.load('https://example.com/faqs.json')
    assert [e.question for e in store] == ['Remote?']
    assert calls == [('https://example.com/faqs.json', 5)]
