"""Tests for rendering Mustache templates through validated data."""

import chevron
import pytest
from mustache_guard import (
    render, find_missing, compare_render, wrap, Validator,
    MissingPropertyError, MAX_TIME_DIFFERENCE_MS,
)


# (name, template, data, partials) for well-formed data
RENDER_CASES = [
    ('plain text', 'Hello, world!', {}, None),
    ('variable', 'Hello, {{subject}}!', {'subject': 'world'}, None),
    ('dotted name', 'Hello, {{subject.name}}!', {'subject': {'name': 'world'}}, None),
    ('deep dotted name', '{{a.b.c.d}}', {'a': {'b': {'c': {'d': 'deep'}}}}, None),
    ('html escaping', '{{html}} {{{html}}} {{&html}}', {'html': '<b>"&"</b>'}, None),
    ('integer', '{{n}} items', {'n': 0}, None),
    ('float', '{{x}}', {'x': 1.25}, None),
    ('explicit none', '[{{value}}]', {'value': None}, None),
    ('false section', '{{#flag}}shown{{/flag}}', {'flag': False}, None),
    ('true section', '{{#flag}}shown{{/flag}}', {'flag': True}, None),
    ('mapping section', '{{#person}}{{name}} ({{age}}){{/person}}',
     {'person': {'name': 'Ann', 'age': 30}}, None),
    ('list section', '{{#people}}{{name}}, {{/people}}',
     {'people': [{'name': 'Ann'}, {'name': 'Bob'}]}, None),
    ('implicit iterator', '{{#items}}({{.}}){{/items}}', {'items': [1, 'two', 3.0]}, None),
    ('empty list section', '{{#items}}never{{/items}}', {'items': []}, None),
    ('inverted empty list', '{{^items}}none{{/items}}', {'items': []}, None),
    ('inverted present', '{{^items}}none{{/items}}', {'items': [1]}, None),
    ('nested lists', '{{#rows}}[{{#cells}}{{v}}{{/cells}}]{{/rows}}',
     {'rows': [{'cells': [{'v': 1}, {'v': 2}]}, {'cells': []}]}, None),
    ('list index', '{{items.1}}', {'items': ['a', 'b']}, None),
    ('dotted section', '{{#a.b}}{{c}}{{/a.b}}', {'a': {'b': {'c': 'x'}}}, None),
    ('comment', 'a{{! ignored }}b', {}, None),
    ('partial', '{{>user}}!', {'name': 'Ann'}, {'user': '<i>{{name}}</i>'}),
    ('partial in section', '{{#people}}{{>user}}{{/people}}',
     {'people': [{'name': 'Ann'}, {'name': 'Bob'}]}, {'user': '<{{name}}>'}),
    ('tuple section', '{{#pair}}{{.}}{{/pair}}', {'pair': ('x', 'y')}, None),
    ('string root', 'static', 'root string', None),
]


@pytest.mark.parametrize(
    'template, data, partials',
    [case[1:] for case in RENDER_CASES],
    ids=[case[0] for case in RENDER_CASES],
)
def test_output_matches_raw_render(template, data, partials):
    """Test that validated and raw renders are byte-identical."""
    expected = chevron.render(template, data, partials_dict=partials or {})
    assert render(template, data, partials) == expected


def test_simple_render():
    """Test the basic render helper."""
    assert render('Hello {{subject.name}}!', {'subject': {'name': 'world'}}) == 'Hello world!'


def test_missing_nested_property_raises():
    """Test the reported path for a missing leaf."""
    with pytest.raises(MissingPropertyError) as excinfo:
        render('Hello {{subject.name}}!', {'subject': {}})
    assert str(excinfo.value) == 'Missing Mustache data property: subject > name'


def test_missing_first_segment_raises():
    """Test that the path stops at the first absent segment."""
    with pytest.raises(MissingPropertyError) as excinfo:
        render('Hello {{subject.name}}!', {'subjects': {'name': 'world'}})
    assert str(excinfo.value) == 'Missing Mustache data property: subject'


def test_missing_section_property():
    """Test that sections over lists report the item index."""
    data = {'people': [{'name': 'Ann'}, {'name': 'Bob', 'nickname': 'B'}]}
    with pytest.raises(MissingPropertyError) as excinfo:
        render('{{#people}}{{nickname}}{{/people}}', data)
    assert excinfo.value.path == ('people', '0', 'nickname')
    assert str(excinfo.value) == 'Missing Mustache data property: people > 0 > nickname'


def test_missing_section_name():
    """Test a missing section key."""
    with pytest.raises(MissingPropertyError) as excinfo:
        render('{{#items}}x{{/items}}', {})
    assert excinfo.value.path == ('items',)


def test_outer_context_name_reported_against_item():
    """Test that each context is validated as it is read."""
    data = {'greeting': 'hi', 'people': [{'name': 'Ann'}]}
    with pytest.raises(MissingPropertyError) as excinfo:
        render('{{#people}}{{greeting}}{{/people}}', data)
    assert excinfo.value.path == ('people', '0', 'greeting')


def test_missing_partial_variable():
    """Test a missing property read from inside a partial."""
    with pytest.raises(MissingPropertyError) as excinfo:
        render('{{>user}}', {'user': {}}, {'user': '{{user.email}}'})
    assert excinfo.value.path == ('user', 'email')


def test_explicit_none_renders_empty():
    """Test that None values render like the raw data."""
    assert render('[{{value.inner}}]', {'value': None}) == '[]'


def test_handler_render_completes():
    """Test that with a handler the render finishes and missing values are empty."""
    calls = []
    output = render('Hello {{subject.name}}!', {'subject': {}}, handle_error=calls.append)
    assert output == 'Hello !'
    assert calls == [['subject', 'name']]


def test_handler_called_once_for_dotted_miss():
    """Test that a miss early in a dotted name is reported once."""
    calls = []
    output = render('[{{a.b.c}}]', {}, handle_error=calls.append)
    assert output == '[]'
    assert calls == [['a']]


def test_handler_joins_section_path_once():
    """Test that a handler joining segments sees the item path exactly once."""
    seen = []
    output = render(
        '{{#people}}{{email}}{{/people}}',
        {'people': [{'name': 'a'}]},
        handle_error=lambda path: seen.append('.'.join(path)),
    )
    assert output == ''
    assert seen == ['people.0.email']


@pytest.mark.parametrize('error_class', [ValueError, KeyError, IndexError, AttributeError, TypeError, RuntimeError])
def test_throwing_handler_aborts_render(error_class):
    """Test that a handler can customise errors by raising its own."""
    def handle_error(path):
        raise error_class(f"Custom error: {'.'.join(path)}")

    with pytest.raises(error_class, match='Custom error: subject.name'):
        render('Hello, {{subject.name}}!', {'subject': {'names': 'world'}}, handle_error=handle_error)


def test_throwing_handler_aborts_validator_render():
    """Test the same through Validator.render and compare_render."""
    def handle_error(path):
        raise ValueError('.'.join(path))

    with pytest.raises(ValueError, match='^nope$'):
        Validator(handle_error=handle_error).render('{{nope}}', {})
    with pytest.raises(ValueError, match='^nope$'):
        compare_render('{{nope}}', {}, handle_error=handle_error)


def test_handler_outer_context_output_differs():
    """Test that in handler mode an outer-context name reads as empty on the item."""
    calls = []
    data = {'greeting': 'hi', 'people': [{'name': 'Ann'}]}
    template = '{{#people}}{{greeting}}{{/people}}'
    assert chevron.render(template, data) == 'hi'
    assert render(template, data, handle_error=calls.append) == ''
    assert calls == [['people', '0', 'greeting']]


def test_find_missing_collects_all():
    """Test collecting every missing path from one render."""
    template = '{{title}} {{#people}}{{name}} {{email}}{{/people}} {{footer.text}}'
    data = {'title': 'T', 'people': [{'name': 'Ann'}, {'name': 'Bob'}], 'footer': {}}
    assert find_missing(template, data) == [
        ('people', '0', 'email'),
        ('people', '1', 'email'),
        ('footer', 'text'),
    ]


def test_find_missing_clean_data():
    """Test that well-formed data reports nothing."""
    assert find_missing('{{a}} {{b.c}}', {'a': 1, 'b': {'c': None}}) == []


def test_validator_render():
    """Test rendering through a configured Validator."""
    validator = Validator()
    assert validator.render('{{#xs}}{{.}}{{/xs}}', {'xs': [1, 2]}) == '12'
    with pytest.raises(MissingPropertyError):
        validator.render('{{nope}}', {})


def test_wrapped_data_with_engine_directly():
    """Test handing wrapped data straight to chevron."""
    data = wrap({'subject': {'name': 'world'}})
    assert chevron.render('Hello {{subject.name}}', data) == 'Hello world'


def test_compare_render_outputs_match():
    """Test the render comparison helper."""
    comparison = compare_render('{{#people}}{{name}}{{/people}}', {'people': [{'name': 'Ann'}]})
    assert comparison.outputs_match
    assert comparison.validated_output == 'Ann'
    assert comparison.raw_time_ms >= 0
    assert comparison.validated_time_ms >= 0


def test_compare_render_raises_before_timing():
    """Test that a missing property surfaces from the comparison."""
    with pytest.raises(MissingPropertyError):
        compare_render('{{missing}}', {})


@pytest.mark.parametrize(
    'template, data, partials',
    [case[1:] for case in RENDER_CASES],
    ids=[case[0] for case in RENDER_CASES],
)
def test_validation_overhead_within_bound(template, data, partials):
    """Test that validation adds less than a fixed absolute time to rendering."""
    comparison = compare_render(template, data, partials, repeat=5)
    assert comparison.outputs_match
    assert comparison.delta_ms < MAX_TIME_DIFFERENCE_MS, comparison


def test_validation_overhead_large_data():
    """Test the bound on a larger render."""
    data = {'rows': [{'id': i, 'name': f'row {i}', 'tags': ['a', 'b']} for i in range(50)]}
    template = '{{#rows}}<tr><td>{{id}}</td><td>{{name}}</td>{{#tags}}<i>{{.}}</i>{{/tags}}</tr>{{/rows}}'
    comparison = compare_render(template, data, repeat=3)
    assert comparison.outputs_match
    assert comparison.delta_ms < MAX_TIME_DIFFERENCE_MS, comparison


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
