import pytest

from jsonata_response.domain.models.errors import ErrorKind, ResponseTagError
from jsonata_response.domain.services import body_extractor
from jsonata_response.domain.services.body_extractor import (
    BodyExtractor,
    check_response,
    decode_body,
    match_jsonata,
    resolve_charset,
)

from conftest import make_response


def _extract(body, query, content_type='application/json'):
    response = make_response(body=body, content_type=content_type)
    return BodyExtractor().extract(response, query)


def _kind(excinfo):
    return excinfo.value.kind


# --- validity gate ---

def test_missing_response_fails():
    with pytest.raises(ResponseTagError) as ei:
        check_response(None)
    assert _kind(ei) is ErrorKind.NO_RESPONSE
    assert str(ei.value) == 'No responses for request'


def test_response_error_fails():
    with pytest.raises(ResponseTagError) as ei:
        check_response(make_response(error='boom'))
    assert _kind(ei) is ErrorKind.RESPONSE_ERROR
    assert str(ei.value) == 'Failed to send dependent request boom'


@pytest.mark.parametrize('status', [None, 0])
def test_missing_status_fails(status):
    with pytest.raises(ResponseTagError) as ei:
        check_response(make_response(status_code=status))
    assert _kind(ei) is ErrorKind.INVALID_STATUS


def test_error_is_checked_before_status():
    with pytest.raises(ResponseTagError) as ei:
        check_response(make_response(status_code=None, error='boom'))
    assert _kind(ei) is ErrorKind.RESPONSE_ERROR


def test_usable_response_passes_through():
    response = make_response(status_code=404)
    assert check_response(response) is response


# --- query gate ---

@pytest.mark.parametrize('query', ['', '   ', '\n\t', None])
def test_empty_query_fails(query):
    with pytest.raises(ResponseTagError) as ei:
        _extract({'a': 1}, query)
    assert _kind(ei) is ErrorKind.MISSING_FILTER
    assert str(ei.value) == 'No filter specified'


def test_query_is_trimmed():
    assert _extract({'a': 1}, '  a \n') == '1'


# --- charset ---

@pytest.mark.parametrize('content_type, expected', [
    ('application/json; charset=ISO-8859-1', 'ISO-8859-1'),
    ('application/json;charset=utf_8', 'utf_8'),
    ('application/json; Charset=windows-1252', 'windows-1252'),
    ('application/json', 'utf-8'),
    ('', 'utf-8'),
    (None, 'utf-8'),
])
def test_resolve_charset(content_type, expected):
    assert resolve_charset(content_type) == expected


def test_resolve_charset_custom_default():
    assert resolve_charset('application/json', default='latin-1') == 'latin-1'


def test_decode_latin1_body():
    raw = '{"name":"café"}'.encode('latin-1')
    assert decode_body(raw, 'ISO-8859-1') == '{"name":"café"}'
    assert _extract(raw, 'name', 'application/json; charset=ISO-8859-1') == 'café'


def test_decode_strips_utf8_bom():
    raw = b'\xef\xbb\xbf{"a":1}'
    assert decode_body(raw, 'utf-8') == '{"a":1}'
    assert _extract(raw, 'a') == '1'


def test_unknown_charset_falls_back(caplog):
    with caplog.at_level('WARNING'):
        text = decode_body(b'{"a":"x"}', 'x-no-such-charset')
    assert text == '{"a":"x"}'
    assert 'Failed to decode body' in caplog.text


def test_mismatched_charset_falls_back_with_replacement():
    raw = b'{"a":"caf\xe9"}'
    text = decode_body(raw, 'utf-8')
    assert text == '{"a":"caf\ufffd"}'
    assert _extract(raw, 'a') == 'caf\ufffd'


# --- parse / compile / evaluate ---

def test_number_result():
    assert _extract({'a': 1}, 'a') == '1'


def test_string_result_is_unquoted():
    assert _extract({'a': 'hi'}, 'a') == 'hi'


def test_string_with_quotes_is_returned_verbatim():
    assert _extract({'a': 'say "hi"'}, 'a') == 'say "hi"'


def test_array_result_is_compact_json():
    assert _extract({'a': [1, 2, 3]}, 'a') == '[1,2,3]'


def test_object_and_boolean_results():
    assert _extract({'a': {'b': True}}, 'a') == '{"b":true}'
    assert _extract({'a': False}, 'a') == 'false'


def test_float_results_keep_fraction():
    assert _extract({'a': 1.5}, 'a') == '1.5'


def test_expression_result():
    body = {'items': [{'price': 2}, {'price': 3}]}
    assert _extract(body, '$sum(items.price)') == '5'
    assert _extract(body, 'items[price > 2].price') == '3'


def test_non_ascii_is_preserved():
    assert _extract({'a': ['ü']}, 'a') == '["ü"]'


def test_malformed_body_fails_regardless_of_query():
    for query in ('a', 'a['):
        with pytest.raises(ResponseTagError) as ei:
            _extract(b'not json', query)
        assert _kind(ei) is ErrorKind.INVALID_JSON
        assert str(ei.value).startswith('Invalid JSON: ')


def test_empty_body_is_invalid_json():
    with pytest.raises(ResponseTagError) as ei:
        _extract(b'', 'a')
    assert _kind(ei) is ErrorKind.INVALID_JSON


def test_invalid_query_fails_before_evaluation():
    with pytest.raises(ResponseTagError) as ei:
        match_jsonata('{"a":1}', 'a[')
    assert _kind(ei) is ErrorKind.INVALID_QUERY
    assert str(ei.value) == 'Invalid JSONata expression: a['
    assert ei.value.detail == 'a['


class _FakeExpression:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def evaluate(self, data):
        if self._error:
            raise self._error
        return self._result


def test_evaluation_failure(monkeypatch):
    monkeypatch.setattr(body_extractor, 'compile_query', lambda q: _FakeExpression(error=RuntimeError('D3030')))
    with pytest.raises(ResponseTagError) as ei:
        match_jsonata('{"a":1}', 'a')
    assert _kind(ei) is ErrorKind.INVALID_QUERY_RESULT
    assert str(ei.value) == 'Invalid JSONata response: a'


def test_function_result_is_invalid(monkeypatch):
    monkeypatch.setattr(body_extractor, 'compile_query', lambda q: _FakeExpression(result=lambda x: x))
    with pytest.raises(ResponseTagError) as ei:
        match_jsonata('{"a":1}', '$sum')
    assert _kind(ei) is ErrorKind.INVALID_QUERY_RESULT


def test_non_finite_result_is_invalid(monkeypatch):
    monkeypatch.setattr(body_extractor, 'compile_query', lambda q: _FakeExpression(result=float('inf')))
    with pytest.raises(ResponseTagError) as ei:
        match_jsonata('{"a":1}', 'a')
    assert _kind(ei) is ErrorKind.INVALID_QUERY_RESULT


def test_no_match_is_invalid():
    with pytest.raises(ResponseTagError) as ei:
        _extract({'a': 1}, 'missing')
    assert _kind(ei) is ErrorKind.INVALID_QUERY_RESULT


def test_null_result_is_json_null():
    assert _extract({'a': None}, 'a') == 'null'
    assert _extract({'a': {'b': None}}, 'a.b') == 'null'
    assert _extract({'a': [1, None]}, 'a') == '[1,null]'


def test_non_standard_number_constants_are_invalid_json():
    for raw in (b'{"a": NaN}', b'{"a": Infinity}', b'{"a": -Infinity}'):
        with pytest.raises(ResponseTagError) as ei:
            _extract(raw, 'a')
        assert _kind(ei) is ErrorKind.INVALID_JSON


def test_integral_floats_print_like_integers(monkeypatch):
    monkeypatch.setattr(body_extractor, 'compile_query', lambda q: _FakeExpression(result=[1.0, 2.5, {'n': 3.0}]))
    assert match_jsonata('{}', 'x') == '[1,2.5,{"n":3}]'


def test_extraction_is_repeatable():
    response = make_response(body={'a': {'b': [1, 'two']}})
    extractor = BodyExtractor()
    first = extractor.extract(response, 'a')
    second = extractor.extract(response, 'a')
    assert first == second == '{"b":[1,"two"]}'


def test_explicit_body_overrides_response_body():
    response = make_response(body={'a': 'stored'})
    assert BodyExtractor().extract(response, 'a', body=b'{"a":"buffer"}') == 'buffer'
