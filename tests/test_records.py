"""Tests for record shape normalization and value coercion."""

import pytest
from arcbos_ops.utils.records import (
    as_records,
    format_number,
    to_number,
    to_text,
    unwrap_records,
)

class TestUnwrapRecords:
    
    def test_bare_list(self):
        assert unwrap_records([1, 2]) == [1, 2]
    
    def test_first_list_property_wins(self):
        doc = {'meta': {'v': 1}, 'items': [{'a': 1}], 'rows': [{'b': 2}]}
        
        assert unwrap_records(doc) == [{'a': 1}]
    
    def test_dict_of_objects(self):
        doc = {'A': {'id': 'A'}, 'B': {'id': 'B'}}
        
        assert unwrap_records(doc) == [{'id': 'A'}, {'id': 'B'}]
    
    @pytest.mark.parametrize('doc', [None, 3, 'text', {}, {'count': 2}, {'a': {'x': 1}, 'b': 2}])
    def test_unrecognised_shapes(self, doc):
        assert unwrap_records(doc) is None
        assert as_records(doc) == []
    
    def test_as_records_drops_non_dicts(self):
        assert as_records({'items': [{'a': 1}, None, 'x', 4]}) == [{'a': 1}]

class TestCoercion:
    
    @pytest.mark.parametrize('value, expected', [
        (None, ''),
        ('  A  ', 'A'),
        (0, '0'),
        (2.0, '2'),
        (False, 'false'),
        ([], ''),
        (['a', 'b'], 'a,b'),
    ])
    def test_to_text(self, value, expected):
        assert to_text(value) == expected
    
    @pytest.mark.parametrize('value, expected', [
        (3, 3.0),
        ('2.5', 2.5),
        (' 4 ', 4.0),
        ('', None),
        ('abc', None),
        (True, None),
        (float('inf'), None),
        ('nan', None),
        ([1], None),
    ])
    def test_to_number(self, value, expected):
        assert to_number(value) == expected
    
    def test_to_number_default(self):
        assert to_number(None, 1.0) == 1.0

    def test_to_number_int_too_large_for_float(self):
        assert to_number(10 ** 400) is None
        assert to_number(10 ** 400, 1.0) == 1.0
    
    def test_format_number(self):
        assert format_number(5.0) == '5'
        assert format_number(2.5) == '2.5'
        assert format_number(7) == '7'
