import pytest
from bson import ObjectId

from database import serialize, to_object_id


@pytest.mark.parametrize('value', [None, '', 123, 'not-an-id', '607f1f77bcf86cd7994390'])
def test_to_object_id_rejects_non_ids(value):
    assert to_object_id(value) is None


def test_to_object_id_parses_hex_and_passes_through():
    oid = ObjectId('607f1f77bcf86cd799439011')
    assert to_object_id('607f1f77bcf86cd799439011') == oid
    assert to_object_id(oid) is oid


def test_serialize_mirrors_id():
    oid = ObjectId()
    assert serialize({'_id': oid, 'patientId': oid}) == {'_id': str(oid), 'patientId': str(oid), 'id': str(oid)}
    assert serialize(None) is None
